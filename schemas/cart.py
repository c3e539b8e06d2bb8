# schemas/cart.py
from pydantic import Field
from typing import List, Optional

from schemas.base import CamelModel


class CartLine(CamelModel):
    id: str
    product_id: str
    quantity: int = Field(ge=1)
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    selected: bool = True


class CartAdd(CamelModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None


class CartLinePatch(CamelModel):
    quantity: Optional[int] = Field(None, ge=0)   # 0 removes the line
    selected: Optional[bool] = None


class CartOut(CamelModel):
    user_id: str
    items: List[CartLine]

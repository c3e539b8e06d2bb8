from datetime import datetime
from typing import List, Optional

from schemas.base import CamelModel


class DraftLine(CamelModel):
    product_id: str
    product_name: Optional[str] = None
    quantity: int = 1


class IncompleteOrderIn(CamelModel):
    session_id: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    cart_items: List[DraftLine] = []


class IncompleteOrderOut(IncompleteOrderIn):
    updated_at: Optional[datetime] = None

from pydantic import Field
from typing import Optional, List

from schemas.base import CamelModel


class ProductBase(CamelModel):
    name: Optional[str] = None
    new_price: Optional[float] = Field(None, ge=0)
    purchase_price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    images: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    barcode: Optional[str] = None
    free_shipping: Optional[bool] = None


class ProductCreate(ProductBase):
    name: str
    new_price: float = Field(ge=0)
    purchase_price: float = Field(0, ge=0)
    stock: int = Field(ge=0)
    images: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    barcode: str = ""
    free_shipping: bool = False


class ProductUpdate(ProductBase):
    pass


class ProductSnapshot(ProductCreate):
    """Read-only view of a catalog product as checkout sees it."""

    id: str = Field(alias="_id")

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from schemas.base import CamelModel


class CouponCreate(CamelModel):
    name: str = ""
    code: str = Field(min_length=1)
    discount_type: Literal["percentage", "fixed"] = "percentage"
    discount_value: float = Field(gt=0)
    min_order_amount: float = Field(0, ge=0)
    start_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    status: Literal["active", "inactive"] = "inactive"
    image: Optional[str] = None
    product_ids: List[str] = Field(default_factory=list)


class CouponOut(CouponCreate):
    id: str


class ApplyCouponRequest(CamelModel):
    code: str
    total_amount: float = Field(ge=0)
    product_ids: List[str] = Field(default_factory=list)


class ApplyCouponResponse(CamelModel):
    discount: float
    code: str

from typing import Optional

from pydantic import Field

from schemas.base import CamelModel


class PaymentInitRequest(CamelModel):
    tran_id: str = Field(alias="tran_id")
    order_id: str
    total_amount: float = Field(gt=0)
    full_name: str
    email: Optional[str] = None
    phone: str
    address: str


class PaymentInitResponse(CamelModel):
    gateway_page_url: str = Field(alias="GatewayPageURL")

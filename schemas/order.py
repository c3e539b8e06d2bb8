from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from schemas.base import CamelModel

Zone = Literal["inside", "outside"]
PaymentMethod = Literal["cod", "online"]


class OrderStatus(str, Enum):
    PENDING = "pending"                  # cash on delivery, awaiting confirmation
    INITIATED = "initiated"              # online order written, gateway not reached yet
    PAYMENT_PENDING = "payment_pending"  # gateway session open
    PAID = "paid"
    EXPIRED = "expired"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class CheckoutForm(CamelModel):
    full_name: str = ""
    phone: str = ""
    email: Optional[EmailStr] = None
    district: str = ""
    address: str = ""
    shipping: Zone = "outside"
    payment: PaymentMethod = "cod"


class CheckoutRequest(CheckoutForm):
    coupon: Optional[str] = None
    session_id: Optional[str] = None


class QuoteRequest(CamelModel):
    shipping: Zone = "outside"
    coupon: Optional[str] = None


class QuoteResponse(CamelModel):
    subtotal: float
    shipping_cost: float
    discount: float
    total: float
    coupon: Optional[str] = None
    message: Optional[str] = None


class OrderLine(CamelModel):
    product_id: str
    product_name: str
    barcode: str = ""
    product_image: str
    price: float
    purchase_price: float = 0
    color: str = "-"
    size: str = "-"
    quantity: int = Field(ge=1)


class Order(CamelModel):
    id: Optional[str] = Field(None, alias="_id")
    full_name: str
    phone: str
    email: Optional[str] = None
    district: str = ""
    address: str
    shipping: Zone
    payment: PaymentMethod
    cart_items: List[OrderLine]
    subtotal: float
    shipping_cost: float
    discount: float = 0
    total: float
    coupon: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    tran_id: str = Field(alias="tran_id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    order_type: str = "online"
    user_id: Optional[str] = None
    session_id: Optional[str] = None


class CheckoutResponse(CamelModel):
    order_id: str
    tran_id: str = Field(alias="tran_id")
    status: OrderStatus
    total: float
    gateway_page_url: Optional[str] = Field(None, alias="GatewayPageURL")


class PaymentStatusOut(CamelModel):
    order_id: str
    tran_id: str = Field(alias="tran_id")
    status: OrderStatus


class StatusUpdate(CamelModel):
    status: OrderStatus

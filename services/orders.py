"""
Order assembly: the checkout form is validated and cart lines are frozen into order lines.

An OrderLine copies price, purchase price, image and variant out of the
catalog at assembly time.
"""

import re
import uuid
from datetime import datetime
from typing import Optional, Sequence

from core.config import COUNTRY_CODE, PLACEHOLDER_IMAGE_URL
from core.errors import ValidationError
from schemas.order import CheckoutForm, Order, OrderLine, OrderStatus
from services.pricing import PricedLine, Pricing

PHONE_RE = re.compile(r"^01\d{9}$")


def validate_form(form: CheckoutForm) -> None:
    missing = [
        label
        for label, value in (("full name", form.full_name), ("phone", form.phone), ("address", form.address))
        if not value.strip()
    ]
    if missing:
        raise ValidationError("Please fill all required fields: " + ", ".join(missing))
    if not PHONE_RE.match(form.phone.strip()):
        raise ValidationError("Phone number must be 11 digits and start with 01")


def normalize_phone(raw: str, country_code: str = COUNTRY_CODE) -> str:
    digits = re.sub(r"\D", "", raw)
    if digits.startswith(country_code):
        return digits
    return country_code + digits


def _first_or_dash(options: Sequence[str]) -> str:
    return options[0] if options else "-"


def freeze_line(priced: PricedLine, placeholder_image: str = PLACEHOLDER_IMAGE_URL) -> OrderLine:
    line, product = priced.line, priced.product
    return OrderLine(
        product_id=product.id,
        product_name=product.name,
        barcode=product.barcode,
        product_image=product.images[0] if product.images else placeholder_image,
        price=product.new_price,
        purchase_price=product.purchase_price,
        color=line.selected_color or _first_or_dash(product.colors),
        size=line.selected_size or _first_or_dash(product.sizes),
        quantity=line.quantity,
    )


def new_tran_id() -> str:
    return "TXN-" + uuid.uuid4().hex[:16].upper()


def initial_status(payment: str) -> OrderStatus:
    return OrderStatus.INITIATED if payment == "online" else OrderStatus.PENDING


def build_order(
    form: CheckoutForm,
    lines: Sequence[PricedLine],
    pricing: Pricing,
    coupon_code: Optional[str] = None,
    tran_id: Optional[str] = None,
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
) -> Order:
    validate_form(form)
    return Order(
        id=str(uuid.uuid4()),
        full_name=form.full_name.strip(),
        phone=normalize_phone(form.phone),
        email=form.email,
        district=form.district,
        address=form.address.strip(),
        shipping=form.shipping,
        payment=form.payment,
        cart_items=[freeze_line(pl) for pl in lines],
        subtotal=pricing.subtotal,
        shipping_cost=pricing.shipping_cost,
        discount=pricing.discount,
        total=pricing.total,
        coupon=coupon_code,
        status=initial_status(form.payment),
        tran_id=tran_id or new_tran_id(),
        created_at=datetime.utcnow(),
        user_id=user_id,
        session_id=session_id,
    )

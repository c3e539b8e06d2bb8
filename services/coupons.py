"""
Coupon validation and the coupon applier.

validate_coupon() is the authoritative discount source. CouponApplier keeps
the checkout's discount state and overlays whatever the validator returns;
it never touches the subtotal.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.errors import CheckoutError, CouponError, ValidationError
from schemas.coupon import ApplyCouponResponse

logger = logging.getLogger(__name__)

CouponValidator = Callable[[str, float], Awaitable[ApplyCouponResponse]]


def _naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    # Mongo hands back naive UTC datetimes
    if dt is not None and dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def discount_for(coupon: dict, total_amount: float) -> float:
    value = float(coupon.get("discountValue", 0))
    if coupon.get("discountType") == "percentage":
        discount = round(total_amount * value / 100, 2)
    else:
        discount = value
    return min(discount, total_amount)


async def validate_coupon(
    db: AsyncIOMotorDatabase,
    code: str,
    total_amount: float,
    product_ids: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> ApplyCouponResponse:
    code = code.strip()
    if not code:
        raise ValidationError("Please enter a coupon code")

    coupon = await db.coupons.find_one({"code": code})
    if not coupon:
        raise CouponError("Invalid coupon code")
    if coupon.get("status", "inactive") != "active":
        raise CouponError("This coupon is not active")

    now = _naive_utc(now) or datetime.utcnow()
    start = _naive_utc(coupon.get("startDate"))
    expiry = _naive_utc(coupon.get("expiryDate"))
    if start is not None and now < start:
        raise CouponError("This coupon is not valid yet")
    if expiry is not None and now > expiry:
        raise CouponError("This coupon has expired")

    min_amount = float(coupon.get("minOrderAmount", 0) or 0)
    if total_amount < min_amount:
        raise CouponError(f"Minimum order amount for this coupon is {min_amount:g}")

    allowed = coupon.get("productIds") or []
    # a restricted coupon needs the cart's products to match against
    if allowed and not set(allowed) & set(product_ids):
        raise CouponError("This coupon does not apply to the products in your cart")

    return ApplyCouponResponse(discount=discount_for(coupon, total_amount), code=coupon["code"])


@dataclass
class DiscountState:
    subtotal: float
    discount: float = 0
    applied_coupon: Optional[str] = None
    message: Optional[str] = None


class CouponApplier:
    """Applies a code against the current subtotal; the last response wins."""

    def __init__(self, validator: CouponValidator) -> None:
        self._validator = validator

    async def apply(self, state: DiscountState, code: str) -> DiscountState:
        code = (code or "").strip()
        if not code:
            state.message = "Please enter a coupon code"
            raise ValidationError(state.message)

        try:
            result = await self._validator(code, state.subtotal)
        except CheckoutError as e:
            logger.info("coupon %r rejected: %s", code, e.message)
            state.discount = 0
            state.applied_coupon = None
            state.message = e.message
            raise

        state.discount = result.discount
        state.applied_coupon = result.code
        state.message = None
        return state

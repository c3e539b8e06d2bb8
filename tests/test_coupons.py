from datetime import datetime, timedelta

import pytest

from core.errors import CouponError, ValidationError
from schemas.coupon import ApplyCouponResponse
from services.coupons import CouponApplier, DiscountState, validate_coupon


def coupon_doc(**overrides):
    doc = {
        "_id": "c1",
        "code": "EID10",
        "discountType": "percentage",
        "discountValue": 10,
        "minOrderAmount": 500,
        "status": "active",
        "productIds": [],
    }
    doc.update(overrides)
    return doc


async def test_percentage_discount(db):
    await db.coupons.insert_one(coupon_doc())
    res = await validate_coupon(db, " EID10 ", 1250)
    assert res.discount == 125
    assert res.code == "EID10"


async def test_fixed_discount_is_capped_at_amount(db):
    await db.coupons.insert_one(coupon_doc(discountType="fixed", discountValue=800, minOrderAmount=0))
    res = await validate_coupon(db, "EID10", 600)
    assert res.discount == 600


@pytest.mark.parametrize("overrides, amount, message", [
    ({}, 499, "Minimum order amount"),
    ({"status": "inactive"}, 1000, "not active"),
    ({"expiryDate": datetime.utcnow() - timedelta(days=1)}, 1000, "expired"),
    ({"startDate": datetime.utcnow() + timedelta(days=1)}, 1000, "not valid yet"),
    ({"productIds": ["other"]}, 1000, "does not apply"),
])
async def test_rejections(db, overrides, amount, message):
    await db.coupons.insert_one(coupon_doc(**overrides))
    with pytest.raises(CouponError) as exc:
        await validate_coupon(db, "EID10", amount, product_ids=["p1"])
    assert message in exc.value.message


async def test_restricted_coupon_needs_cart_products(db):
    await db.coupons.insert_one(coupon_doc(productIds=["p9"]))

    with pytest.raises(CouponError):
        await validate_coupon(db, "EID10", 1000)
    res = await validate_coupon(db, "EID10", 1000, product_ids=["p1", "p9"])
    assert res.discount == 100


async def test_unknown_code(db):
    with pytest.raises(CouponError):
        await validate_coupon(db, "NOPE", 1000)


async def test_applier_overlays_discount():
    async def validator(code, subtotal):
        return ApplyCouponResponse(discount=100, code=code)

    state = DiscountState(subtotal=1000)
    await CouponApplier(validator).apply(state, "FLAT100")

    assert state.discount == 100
    assert state.applied_coupon == "FLAT100"
    assert state.subtotal == 1000


async def test_applier_failure_clears_discount_only():
    async def validator(code, subtotal):
        raise CouponError("This coupon has expired")

    state = DiscountState(subtotal=1000, discount=100, applied_coupon="FLAT100")
    with pytest.raises(CouponError):
        await CouponApplier(validator).apply(state, "OLD")

    assert state.discount == 0
    assert state.applied_coupon is None
    assert state.subtotal == 1000
    assert state.message == "This coupon has expired"


async def test_applier_rejects_blank_code_without_calling_validator():
    calls = []

    async def validator(code, subtotal):
        calls.append(code)

    with pytest.raises(ValidationError):
        await CouponApplier(validator).apply(DiscountState(subtotal=10), "   ")
    assert calls == []


async def test_last_response_wins():
    amounts = {"A": 50, "B": 80}

    async def validator(code, subtotal):
        return ApplyCouponResponse(discount=amounts[code], code=code)

    applier = CouponApplier(validator)
    state = DiscountState(subtotal=1000)
    await applier.apply(state, "A")
    await applier.apply(state, "B")
    assert (state.discount, state.applied_coupon) == (80, "B")

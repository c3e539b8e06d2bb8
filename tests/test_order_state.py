from datetime import datetime, timedelta

import pytest

from core.errors import InvalidTransitionError, NotFoundError
from schemas.order import OrderStatus as S
from services.order_state import can_transition, expire_stale_payments, transition
from tests.factories import product_doc


def order_doc(oid="o1", status="initiated", qty=2, created_at=None):
    return {
        "_id": oid,
        "tran_id": f"TXN-{oid}",
        "status": status,
        "payment": "online",
        "createdAt": created_at or datetime.utcnow(),
        "cartItems": [{"productId": "p1", "productName": "Cotton Panjabi", "quantity": qty}],
    }


@pytest.mark.parametrize("old, new", [
    (S.INITIATED, S.PAYMENT_PENDING),
    (S.PAYMENT_PENDING, S.PAID),
    (S.PAYMENT_PENDING, S.EXPIRED),
    (S.PENDING, S.CONFIRMED),
    (S.SHIPPED, S.COMPLETED),
])
def test_allowed(old, new):
    assert can_transition(old, new)


@pytest.mark.parametrize("old, new", [
    (S.INITIATED, S.PAID),
    (S.PAID, S.EXPIRED),
    (S.EXPIRED, S.PAID),
    (S.PENDING, S.PAID),
    ("initiated", "bogus"),
])
def test_rejected(old, new):
    assert not can_transition(old, new)


async def test_payment_lifecycle(db):
    await db.orders.insert_one(order_doc())

    await transition(db, "o1", S.PAYMENT_PENDING)
    updated = await transition(db, "o1", S.PAID, valId="v1")

    assert updated["status"] == "paid"
    stored = await db.orders.find_one({"_id": "o1"})
    assert stored["status"] == "paid"
    assert stored["valId"] == "v1"


async def test_illegal_transition_raises(db):
    await db.orders.insert_one(order_doc(status="paid"))
    with pytest.raises(InvalidTransitionError):
        await transition(db, "o1", S.EXPIRED)


async def test_unknown_order(db):
    with pytest.raises(NotFoundError):
        await transition(db, "nope", S.PAID)


async def test_expire_restocks_once(db):
    await db.products.insert_one(product_doc("p1", stock=3))
    await db.orders.insert_one(order_doc(status="payment_pending", qty=2))

    await transition(db, "o1", S.EXPIRED)
    with pytest.raises(InvalidTransitionError):
        await transition(db, "o1", S.EXPIRED)

    assert (await db.products.find_one({"_id": "p1"}))["stock"] == 5


async def test_refund_restocks(db):
    await db.products.insert_one(product_doc("p1", stock=0))
    await db.orders.insert_one(order_doc(status="paid", qty=1))

    await transition(db, "o1", S.REFUNDED)

    assert (await db.products.find_one({"_id": "p1"}))["stock"] == 1


async def test_expire_stale_payments(db):
    old = datetime.utcnow() - timedelta(hours=2)
    await db.products.insert_one(product_doc("p1", stock=0))
    await db.orders.insert_many([
        order_doc("stale", status="payment_pending", qty=1, created_at=old),
        order_doc("fresh", status="payment_pending", qty=1),
        order_doc("paid", status="paid", qty=1, created_at=old),
    ])

    expired = await expire_stale_payments(db, ttl_minutes=30)

    assert expired == ["stale"]
    assert (await db.orders.find_one({"_id": "fresh"}))["status"] == "payment_pending"
    assert (await db.products.find_one({"_id": "p1"}))["stock"] == 1

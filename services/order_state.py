"""
Order status transitions.

The server owns the payment lifecycle of an online order:

    initiated -> payment_pending -> paid | expired

Cash-on-delivery orders start at pending. Admin fulfilment statuses follow
from pending or paid. Expiring, cancelling or refunding puts stock back once.
"""

import logging
from datetime import datetime, timedelta

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.errors import InvalidTransitionError, NotFoundError
from schemas.order import OrderStatus as S

logger = logging.getLogger(__name__)

TRANSITIONS: dict[S, frozenset[S]] = {
    S.INITIATED: frozenset({S.PAYMENT_PENDING, S.EXPIRED}),
    S.PAYMENT_PENDING: frozenset({S.PAID, S.EXPIRED}),
    S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
    S.PAID: frozenset({S.CONFIRMED, S.REFUNDED}),
    S.CONFIRMED: frozenset({S.PROCESSING, S.CANCELLED}),
    S.PROCESSING: frozenset({S.SHIPPED, S.CANCELLED}),
    S.SHIPPED: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset({S.REFUNDED}),
}

RESTOCK_STATUSES = frozenset({S.EXPIRED, S.CANCELLED, S.REFUNDED})


def can_transition(old: str, new: str) -> bool:
    try:
        return S(new) in TRANSITIONS.get(S(old), frozenset())
    except ValueError:
        return False


async def _restock(db: AsyncIOMotorDatabase, order: dict) -> None:
    for it in order.get("cartItems", []):
        await db.products.update_one({"_id": it["productId"]}, {"$inc": {"stock": it["quantity"]}})


async def transition(db: AsyncIOMotorDatabase, order_id: str, new_status: str, **extra) -> dict:
    order = await db.orders.find_one({"_id": order_id})
    if not order:
        raise NotFoundError("Order not found")

    old_status = order.get("status")
    new_status = getattr(new_status, "value", new_status)
    if not can_transition(old_status, new_status):
        raise InvalidTransitionError(old_status, new_status)

    # guard on the old status so two concurrent callbacks cannot both apply
    res = await db.orders.update_one(
        {"_id": order_id, "status": old_status},
        {"$set": {"status": new_status, "updatedAt": datetime.utcnow(), **extra}},
    )
    if res.modified_count != 1:
        current = await db.orders.find_one({"_id": order_id})
        raise InvalidTransitionError(current.get("status") if current else old_status, new_status)

    if S(new_status) in RESTOCK_STATUSES and S(old_status) not in RESTOCK_STATUSES:
        await _restock(db, order)

    logger.info("order %s: %s -> %s", order_id, old_status, new_status)
    return {**order, "status": new_status, **extra}


async def expire_stale_payments(db: AsyncIOMotorDatabase, ttl_minutes: int, now: datetime | None = None) -> list[str]:
    """Expire online orders whose gateway session was never completed."""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(minutes=ttl_minutes)
    stale = await db.orders.find({
        "status": {"$in": [S.INITIATED.value, S.PAYMENT_PENDING.value]},
        "createdAt": {"$lt": cutoff},
    }).to_list(None)

    expired = []
    for order in stale:
        try:
            await transition(db, order["_id"], S.EXPIRED)
        except InvalidTransitionError:
            # a callback got there first
            continue
        expired.append(order["_id"])
    return expired

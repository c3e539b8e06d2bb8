"""
Stock guard and stock reservation.

check_stock() is the advisory pre-submit check against the snapshot the
checkout loaded. reserve_stock()/release_stock() are the authoritative
conditional decrement used when the order is actually written.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.errors import OutOfStockError
from services.pricing import CartPair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockShortfall:
    product_id: str
    product_name: str
    requested: int
    available: int


def find_shortfalls(pairs: Sequence[CartPair]) -> list[StockShortfall]:
    shortfalls = []
    for line, product in pairs:
        if product is None:
            # pricing reports missing products
            continue
        if product.stock == 0 or line.quantity > product.stock:
            shortfalls.append(StockShortfall(product.id, product.name, line.quantity, product.stock))
    return shortfalls


def check_stock(pairs: Sequence[CartPair]) -> None:
    shortfalls = find_shortfalls(pairs)
    if shortfalls:
        raise OutOfStockError(s.product_name for s in shortfalls)


@dataclass(frozen=True)
class Reservation:
    product_id: str
    quantity: int


async def reserve_stock(db: AsyncIOMotorDatabase, items: Sequence[tuple[str, str, int]]) -> list[Reservation]:
    """
    Decrement stock for (product_id, product_name, quantity) items.

    Each decrement only applies while stock >= quantity. If any item fails,
    the ones already taken are put back before OutOfStockError is raised.
    """
    taken: list[Reservation] = []
    for product_id, product_name, quantity in items:
        res = await db.products.update_one(
            {"_id": product_id, "stock": {"$gte": quantity}},
            {"$inc": {"stock": -quantity}},
        )
        if res.modified_count != 1:
            logger.warning("stock reservation failed for %s (qty %s)", product_id, quantity)
            await release_stock(db, taken)
            raise OutOfStockError([product_name])
        taken.append(Reservation(product_id, quantity))
    return taken


async def release_stock(db: AsyncIOMotorDatabase, reservations: Sequence[Reservation]) -> None:
    for r in reservations:
        await db.products.update_one({"_id": r.product_id}, {"$inc": {"stock": r.quantity}})

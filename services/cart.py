# services/cart.py
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from schemas.cart import CartLine
from schemas.product import ProductSnapshot
from services.pricing import CartPair


def normalize_value(val) -> str:
    """Normalize null/undefined values to empty string"""
    return "" if val is None else str(val)


def find_cart_item_index(items: list, product_id: str, color: Optional[str], size: Optional[str]) -> int:
    """Find index of cart item by productId, selectedColor and selectedSize"""
    normalized_color = normalize_value(color)
    normalized_size = normalize_value(size)

    for i, item in enumerate(items):
        if (item.get("productId") == product_id and
            normalize_value(item.get("selectedColor")) == normalized_color and
            normalize_value(item.get("selectedSize")) == normalized_size):
            return i
    return -1


async def get_cart_lines(db: AsyncIOMotorDatabase, user_id: str) -> List[CartLine]:
    cart = await db.carts.find_one({"userId": user_id})
    if not cart:
        return []
    return [
        CartLine.model_validate(item)
        for item in cart.get("items", [])
        if item.get("productId") and item.get("quantity", 0) > 0
    ]


async def load_products(db: AsyncIOMotorDatabase, product_ids: List[str]) -> dict:
    products = {}
    async for doc in db.products.find({"_id": {"$in": list(set(product_ids))}}):
        products[doc["_id"]] = ProductSnapshot.model_validate(doc)
    return products


async def load_selected_lines(db: AsyncIOMotorDatabase, user_id: str) -> List[CartPair]:
    """Selected cart lines paired with their product snapshot (None if gone)."""
    lines = [line for line in await get_cart_lines(db, user_id) if line.selected]
    products = await load_products(db, [line.product_id for line in lines])
    return [(line, products.get(line.product_id)) for line in lines]


async def remove_lines(db: AsyncIOMotorDatabase, user_id: str, line_ids: List[str]) -> None:
    cart = await db.carts.find_one({"userId": user_id})
    if not cart:
        return
    drop = set(line_ids)
    items = [item for item in cart.get("items", []) if item.get("id") not in drop]
    await db.carts.update_one({"userId": user_id}, {"$set": {"items": items}})

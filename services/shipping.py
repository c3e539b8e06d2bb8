# services/shipping.py
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.config import DEFAULT_INSIDE_DHAKA, DEFAULT_OUTSIDE_DHAKA
from schemas.shipping import ShippingRate

SHIPPING_DOC_ID = "shipping"


async def get_shipping_rate(db: AsyncIOMotorDatabase) -> ShippingRate:
    doc = await db.shipping.find_one({"_id": SHIPPING_DOC_ID})
    if not doc:
        return ShippingRate(inside_dhaka=DEFAULT_INSIDE_DHAKA, outside_dhaka=DEFAULT_OUTSIDE_DHAKA)
    return ShippingRate.model_validate(doc)


async def save_shipping_rate(db: AsyncIOMotorDatabase, rate: ShippingRate) -> ShippingRate:
    await db.shipping.update_one({"_id": SHIPPING_DOC_ID}, {"$set": rate.to_doc()}, upsert=True)
    return rate

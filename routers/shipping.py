from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.dependencies import verify_admin
from db import get_db
from schemas.shipping import ShippingRate
from services.shipping import get_shipping_rate, save_shipping_rate

router = APIRouter(prefix="/shipping", tags=["Shipping"])


# GET /shipping - current delivery charges
@router.get("", response_model=ShippingRate)
async def read_shipping(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await get_shipping_rate(db)


# POST /shipping - admin sets delivery charges
@router.post("", response_model=ShippingRate)
async def update_shipping(rate: ShippingRate, user: dict = Depends(verify_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    return await save_shipping_rate(db, rate)

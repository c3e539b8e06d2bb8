from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
import uuid

from core.dependencies import verify_admin
from db import get_db
from schemas.coupon import ApplyCouponRequest, ApplyCouponResponse, CouponCreate, CouponOut
from services.coupons import validate_coupon

router = APIRouter(tags=["Coupons"])


def to_out(doc: dict) -> dict:
    return {"id": str(doc["_id"]), **{k: v for k, v in doc.items() if k != "_id"}}


# POST /apply-coupon - authoritative discount for a code and order amount
@router.post("/apply-coupon", response_model=ApplyCouponResponse)
async def apply_coupon(payload: ApplyCouponRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await validate_coupon(db, payload.code, payload.total_amount, payload.product_ids)


@router.get("/coupons", response_model=list[CouponOut])
async def list_coupons(user: dict = Depends(verify_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    return [to_out(c) for c in await db.coupons.find({}).to_list(200)]


@router.post("/coupons", response_model=dict)
async def create_coupon(coupon: CouponCreate, user: dict = Depends(verify_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    code = coupon.code.strip()
    if await db.coupons.find_one({"code": code}):
        raise HTTPException(status_code=400, detail="Coupon code already exists")

    doc = {"_id": str(uuid.uuid4()), "createdAt": datetime.utcnow(), **coupon.to_doc(), "code": code}
    await db.coupons.insert_one(doc)
    return {"insertedId": doc["_id"]}


@router.delete("/coupons/{coupon_id}")
async def delete_coupon(coupon_id: str, user: dict = Depends(verify_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    res = await db.coupons.delete_one({"_id": coupon_id})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return {"deletedCount": res.deleted_count}

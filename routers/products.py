from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional
from datetime import datetime
import re
import uuid

from core.dependencies import verify_admin
from db import get_db
from schemas.product import ProductCreate, ProductUpdate, ProductSnapshot

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/", response_model=list[ProductSnapshot])
async def get_products(
    q: Optional[str] = Query(None, description="Name or barcode search"),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    match: dict = {}
    if q:
        match["$or"] = [
            {"name": {"$regex": re.escape(q), "$options": "i"}},
            {"barcode": {"$regex": re.escape(q)}},
        ]
    return await db.products.find(match).to_list(limit)


@router.get("/{product_id}", response_model=ProductSnapshot)
async def get_product(product_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    if not (doc := await db.products.find_one({"_id": product_id})):
        raise HTTPException(status_code=404, detail="Product not found")
    return doc


@router.post("/", response_model=ProductSnapshot)
async def create_product(product: ProductCreate, user: dict = Depends(verify_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    doc = {
        "_id": str(uuid.uuid4()),
        "createdAt": datetime.utcnow(),
        **product.to_doc(),
    }
    await db.products.insert_one(doc)
    return doc


@router.put("/{product_id}", response_model=ProductSnapshot)
async def update_product(product_id: str, update: ProductUpdate, user: dict = Depends(verify_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    existing = await db.products.find_one({"_id": product_id})
    if not existing:
        raise HTTPException(status_code=404, detail="Product not found")

    update_data = update.to_doc()
    if not update_data:
        return existing

    await db.products.update_one({"_id": product_id}, {"$set": update_data})
    return {**existing, **update_data}


@router.delete("/{product_id}")
async def delete_product(product_id: str, user: dict = Depends(verify_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    res = await db.products.delete_one({"_id": product_id})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"detail": "Product deleted"}

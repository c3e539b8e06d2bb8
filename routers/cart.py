from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
import uuid

from core.dependencies import get_current_user
from db import get_db
from schemas.cart import CartAdd, CartLinePatch, CartOut
from services.cart import find_cart_item_index, get_cart_lines, normalize_value

router = APIRouter(prefix="/cart", tags=["Cart"])


# GET /cart/ - current user's cart lines
@router.get("/", response_model=CartOut)
async def get_cart(current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    user_id = str(current_user["_id"])
    return {"user_id": user_id, "items": await get_cart_lines(db, user_id)}


# POST /cart/add - add a product variant, merging with an identical line
@router.post("/add")
async def add_to_cart(item: CartAdd, current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    user_id = str(current_user["_id"])
    product = await db.products.find_one({"_id": item.product_id})
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    cart = await db.carts.find_one({"userId": user_id})
    items = cart.get("items", []) if cart else []

    existing_index = find_cart_item_index(items, item.product_id, item.selected_color, item.selected_size)
    if existing_index >= 0:
        items[existing_index]["quantity"] = items[existing_index].get("quantity", 0) + item.quantity
        line_id = items[existing_index]["id"]
    else:
        line_id = str(uuid.uuid4())
        items.append({
            "id": line_id,
            "productId": item.product_id,
            "selectedColor": normalize_value(item.selected_color) or None,
            "selectedSize": normalize_value(item.selected_size) or None,
            "quantity": item.quantity,
            "selected": True,
        })

    await db.carts.update_one({"userId": user_id}, {"$set": {"items": items}}, upsert=True)
    return {"message": "Added to cart", "id": line_id}


# PATCH /cart/{line_id} - change quantity or selection; quantity 0 removes the line
@router.patch("/{line_id}")
async def update_cart_line(
    line_id: str,
    data: CartLinePatch,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    user_id = str(current_user["_id"])
    cart = await db.carts.find_one({"userId": user_id})
    if not cart:
        raise HTTPException(status_code=404, detail="Cart is empty")

    items = cart.get("items", [])
    idx = next((i for i, it in enumerate(items) if it.get("id") == line_id), -1)
    if idx == -1:
        raise HTTPException(status_code=404, detail="Cart line not found")

    if data.quantity is not None and data.quantity <= 0:
        items.pop(idx)
        await db.carts.update_one({"userId": user_id}, {"$set": {"items": items}})
        return {"message": "Removed from cart"}

    if data.quantity is not None:
        items[idx]["quantity"] = data.quantity
    if data.selected is not None:
        items[idx]["selected"] = data.selected

    await db.carts.update_one({"userId": user_id}, {"$set": {"items": items}})
    return {"message": "Cart updated"}


# DELETE /cart/{line_id} - remove one line
@router.delete("/{line_id}")
async def remove_from_cart(line_id: str, current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    user_id = str(current_user["_id"])
    cart = await db.carts.find_one({"userId": user_id})
    items = cart.get("items", []) if cart else []
    remaining = [it for it in items if it.get("id") != line_id]
    if len(remaining) == len(items):
        raise HTTPException(status_code=404, detail="Cart line not found")

    await db.carts.update_one({"userId": user_id}, {"$set": {"items": remaining}})
    return {"message": "Removed from cart"}

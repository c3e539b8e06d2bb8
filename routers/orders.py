# /routers/orders.py
from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.dependencies import get_current_user
from db import get_db
from schemas.order import Order, OrderStatus, PaymentStatusOut
from services.checkout import create_order, reprice_order
from services.order_state import transition

router = APIRouter(prefix="/orders", tags=["Orders"])


async def _own_order(db: AsyncIOMotorDatabase, order_id: str, user: dict, projection: Optional[dict] = None) -> dict:
    order = await db.orders.find_one({"_id": order_id, "userId": str(user["_id"])}, projection)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


# GET /orders/ - current user's orders, newest first
@router.get("/", response_model=list[Order])
async def list_orders(current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    return await db.orders.find({"userId": str(current_user["_id"])}).sort("createdAt", -1).to_list(100)


# POST /orders/ - persist an order assembled by the storefront; prices are checked and stock reserved
@router.post("/", response_model=dict)
async def place_assembled_order(
    order: Order,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    if not order.cart_items:
        raise HTTPException(status_code=400, detail="No products selected")

    placed = await reprice_order(db, order, str(current_user["_id"]))
    order_id = await create_order(db, placed)
    return {"insertedId": order_id, "tran_id": placed.tran_id, "status": placed.status}


# GET /orders/{order_id} - order confirmation view
@router.get("/{order_id}", response_model=Order)
async def get_order_detail(order_id: str, current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    return await _own_order(db, order_id, current_user)


# GET /orders/{order_id}/payment-status - polled by the storefront after redirect
@router.get("/{order_id}/payment-status", response_model=PaymentStatusOut)
async def get_payment_status(order_id: str, current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    order = await _own_order(db, order_id, current_user, {"status": 1, "tran_id": 1})
    return {"order_id": order_id, "tran_id": order["tran_id"], "status": order["status"]}


# DELETE /orders/{order_id} - customer cancels a cash order still 'pending'
@router.delete("/{order_id}")
async def cancel_order(order_id: str, current_user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    order = await _own_order(db, order_id, current_user)

    if order["status"] != OrderStatus.PENDING.value:
        raise HTTPException(status_code=400, detail="Only 'pending' orders can be cancelled")

    await transition(db, order_id, OrderStatus.CANCELLED)
    return {"message": "Order cancelled"}

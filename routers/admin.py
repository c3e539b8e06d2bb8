from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from core.config import PAYMENT_PENDING_TTL_MINUTES
from core.dependencies import verify_admin
from db import get_db
from schemas.order import StatusUpdate
from services.order_state import expire_stale_payments, transition

router = APIRouter(prefix="/admin", tags=["Admin"])

# ===================== Common =====================

def _parse_iso(dt_str: Optional[str]) -> Optional[datetime]:
    if not dt_str:
        return None
    try:
        parsed = datetime.fromisoformat(dt_str.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed

def _date_match(start_date: Optional[str], end_date: Optional[str]) -> Dict[str, Any]:
    start = _parse_iso(start_date)
    end = _parse_iso(end_date)
    cond: Dict[str, Any] = {}
    if start is not None or end is not None:
        cond["createdAt"] = {}
        if start is not None:
            cond["createdAt"]["$gte"] = start
        if end is not None:
            cond["createdAt"]["$lte"] = end
    return cond

# ===================== Orders =====================

@router.get("/orders")
async def list_all_orders(
    status: Optional[str] = Query(None),
    payment: Optional[str] = Query(None, description="cod | online"),
    start_date: Optional[str] = Query(None, description="ISO date, e.g. 2025-08-01"),
    end_date: Optional[str] = Query(None, description="ISO date, e.g. 2025-08-31"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, le=100),
    current_user: dict = Depends(verify_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    skip = (page - 1) * limit
    match: Dict[str, Any] = {}
    if status: match["status"] = status
    if payment: match["payment"] = payment
    match.update(_date_match(start_date, end_date))

    total = await db.orders.count_documents(match)
    rows = await db.orders.find(match).sort("createdAt", -1).skip(skip).limit(limit).to_list(limit)
    orders = [{"id": str(o.pop("_id")), **o} for o in rows]
    return {"orders": orders, "total": total, "page": page, "limit": limit}

@router.put("/orders/{order_id}/status")
async def admin_update_order_status(
    order_id: str,
    payload: StatusUpdate,
    current_user: dict = Depends(verify_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    order = await db.orders.find_one({"_id": order_id}, {"status": 1})
    if order and order.get("status") == payload.status:
        return {"message": "Status unchanged", "order_id": order_id, "status": payload.status}

    # stock goes back on expired/cancelled/refunded
    await transition(db, order_id, payload.status)
    return {"message": "Order status updated", "order_id": order_id, "status": payload.status}

@router.post("/orders/expire-stale")
async def admin_expire_stale_payments(
    ttl_minutes: int = Query(PAYMENT_PENDING_TTL_MINUTES, ge=1),
    current_user: dict = Depends(verify_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    expired = await expire_stale_payments(db, ttl_minutes)
    return {"expired": expired, "count": len(expired)}

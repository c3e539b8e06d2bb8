import logging

from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import RedirectResponse
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.config import FRONTEND_URL
from core.dependencies import get_gateway
from core.errors import InvalidTransitionError
from db import get_db
from schemas.order import OrderStatus
from schemas.payment import PaymentInitRequest, PaymentInitResponse
from services.checkout import start_payment
from services.order_state import transition
from services.payment import PaymentGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sslcommerz", tags=["Payments"])


async def _order_by_tran_id(db: AsyncIOMotorDatabase, tran_id: str) -> dict:
    order = await db.orders.find_one({"tran_id": tran_id})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


async def _settle(db: AsyncIOMotorDatabase, order: dict, new_status: OrderStatus, **extra) -> None:
    try:
        await transition(db, order["_id"], new_status, **extra)
    except InvalidTransitionError as e:
        # gateways retry callbacks; a repeat for a settled order is not an error
        logger.info("ignoring callback for %s: %s", order["tran_id"], e.message)


# POST /sslcommerz/init - open a gateway session for an 'initiated' order
@router.post("/init", response_model=PaymentInitResponse)
async def init_payment(
    payload: PaymentInitRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway),
):
    url = await start_payment(db, gateway, payload)
    return PaymentInitResponse(gateway_page_url=url)


@router.post("/success/{tran_id}")
async def payment_success(
    tran_id: str,
    val_id: str = Form(""),
    db: AsyncIOMotorDatabase = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway),
):
    order = await _order_by_tran_id(db, tran_id)
    if val_id and await gateway.validate(val_id, order["tran_id"], float(order.get("total", 0))):
        await _settle(db, order, OrderStatus.PAID, valId=val_id)
        return RedirectResponse(f"{FRONTEND_URL}/payment-success?tran_id={tran_id}", status_code=303)

    logger.warning("payment for %s did not validate (val_id=%r)", tran_id, val_id)
    await _settle(db, order, OrderStatus.EXPIRED, failureReason="validation failed")
    return RedirectResponse(f"{FRONTEND_URL}/payment-fail?tran_id={tran_id}", status_code=303)


@router.post("/fail/{tran_id}")
async def payment_fail(tran_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    order = await _order_by_tran_id(db, tran_id)
    await _settle(db, order, OrderStatus.EXPIRED, failureReason="payment failed")
    return RedirectResponse(f"{FRONTEND_URL}/payment-fail?tran_id={tran_id}", status_code=303)


@router.post("/cancel/{tran_id}")
async def payment_cancel(tran_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    order = await _order_by_tran_id(db, tran_id)
    await _settle(db, order, OrderStatus.EXPIRED, failureReason="payment cancelled")
    return RedirectResponse(f"{FRONTEND_URL}/payment-cancel?tran_id={tran_id}", status_code=303)

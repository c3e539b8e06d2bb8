from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.dependencies import get_analytics, get_current_user, get_draft_scheduler, get_gateway
from db import get_db
from schemas.order import CheckoutRequest, CheckoutResponse, QuoteRequest, QuoteResponse
from services.analytics import AnalyticsSink
from services.checkout import CheckoutService
from services.drafts import DraftSaveScheduler
from services.payment import PaymentGateway

router = APIRouter(prefix="/checkout", tags=["Checkout"])


def get_checkout_service(
    db: AsyncIOMotorDatabase = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway),
    analytics: AnalyticsSink = Depends(get_analytics),
    drafts: DraftSaveScheduler = Depends(get_draft_scheduler),
) -> CheckoutService:
    return CheckoutService(db, gateway, analytics, drafts)


# POST /checkout/quote - price the selected cart lines for the summary panel
@router.post("/quote", response_model=QuoteResponse)
async def quote(
    payload: QuoteRequest,
    current_user: dict = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    q = await service.quote(str(current_user["_id"]), payload.shipping, payload.coupon)
    return QuoteResponse(
        subtotal=q.pricing.subtotal,
        shipping_cost=q.pricing.shipping_cost,
        discount=q.pricing.discount,
        total=q.pricing.total,
        coupon=q.coupon,
        message=q.message,
    )


# POST /checkout - place the order for the selected cart lines
@router.post("", response_model=CheckoutResponse)
async def place_order(
    payload: CheckoutRequest,
    current_user: dict = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    placed = await service.place_order(
        str(current_user["_id"]),
        payload,
        coupon=payload.coupon,
        session_id=payload.session_id,
    )
    return CheckoutResponse(
        order_id=placed.order.id,
        tran_id=placed.order.tran_id,
        status=placed.order.status,
        total=placed.order.total,
        gateway_page_url=placed.gateway_page_url,
    )

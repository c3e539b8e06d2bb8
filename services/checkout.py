"""
Checkout pipeline.

    cart → pricing (+coupon) → stock guard → order assembly → saga

The saga reserves stock, writes the order and, for online payment, opens the
gateway session. If the gateway refuses, the order is expired and the stock
released, so no order is left sitting in 'initiated'.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pydantic
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.errors import CheckoutError, NotFoundError, PaymentInitError, ValidationError
from schemas.cart import CartLine
from schemas.order import CheckoutForm, Order, OrderStatus
from schemas.payment import PaymentInitRequest
from services import analytics as events
from services.analytics import AnalyticsSink
from services.cart import load_products, load_selected_lines, remove_lines
from services.coupons import CouponApplier, DiscountState, validate_coupon
from services.drafts import DraftSaveScheduler, delete_draft
from services.order_state import transition
from services.orders import build_order, validate_form
from services.payment import PaymentGateway
from services.pricing import CartPair, PricedLine, Pricing, price_lines, totals_for
from services.saga import Saga, SagaFailed
from services.shipping import get_shipping_rate
from services.stock import check_stock, release_stock, reserve_stock

logger = logging.getLogger(__name__)


@dataclass
class Quote:
    lines: list[PricedLine]
    pricing: Pricing
    coupon: Optional[str]
    message: Optional[str] = None


@dataclass
class PlacedOrder:
    order: Order
    gateway_page_url: Optional[str] = None


def payment_request_for(order: Order) -> PaymentInitRequest:
    return PaymentInitRequest(
        tran_id=order.tran_id,
        order_id=order.id,
        total_amount=order.total,
        full_name=order.full_name,
        email=order.email,
        phone=order.phone,
        address=order.address,
    )


def _coupon_validator(db: AsyncIOMotorDatabase, product_ids: list[str]):
    async def validator(code: str, subtotal: float):
        return await validate_coupon(db, code, subtotal, product_ids)
    return validator


async def price_selection(
    db: AsyncIOMotorDatabase,
    pairs: list[CartPair],
    zone: str,
    coupon: Optional[str] = None,
    strict: bool = True,
) -> Quote:
    """Price the lines and overlay the coupon.

    With strict=False a rejected coupon leaves the quote at zero discount and
    carries the rejection in Quote.message instead of raising.
    """
    if not pairs:
        raise ValidationError("Please select at least one product")
    lines = price_lines(pairs)
    rate = await get_shipping_rate(db)
    state = DiscountState(subtotal=sum(pl.line_total for pl in lines))
    if coupon and coupon.strip():
        applier = CouponApplier(_coupon_validator(db, [pl.product_id for pl in lines]))
        try:
            await applier.apply(state, coupon)
        except CheckoutError:
            if strict:
                raise
    pricing = totals_for(lines, rate, zone, state.discount)
    return Quote(lines=lines, pricing=pricing, coupon=state.applied_coupon, message=state.message)


def _variant(value: str) -> Optional[str]:
    return None if value in ("", "-") else value


def _differs(a: float, b: float) -> bool:
    return abs(a - b) > 0.005


async def reprice_order(db: AsyncIOMotorDatabase, submitted: Order, user_id: str) -> Order:
    """Rebuild a client-assembled order from the catalog.

    The client's prices and totals must agree with what the server computes;
    the owner, phone format, status and tran_id are the server's.
    """
    try:
        form = CheckoutForm(
            full_name=submitted.full_name,
            phone=submitted.phone,
            email=submitted.email,
            district=submitted.district,
            address=submitted.address,
            shipping=submitted.shipping,
            payment=submitted.payment,
        )
    except pydantic.ValidationError:
        raise ValidationError("Please enter a valid email address")
    validate_form(form)

    cart_lines = [
        CartLine(
            id=str(i),
            product_id=it.product_id,
            quantity=it.quantity,
            selected_color=_variant(it.color),
            selected_size=_variant(it.size),
        )
        for i, it in enumerate(submitted.cart_items)
    ]
    products = await load_products(db, [cl.product_id for cl in cart_lines])
    pairs = [(cl, products.get(cl.product_id)) for cl in cart_lines]
    q = await price_selection(db, pairs, form.shipping, submitted.coupon)
    order = build_order(form, q.lines, q.pricing, q.coupon, user_id=user_id, session_id=submitted.session_id)

    sent = [(submitted.subtotal, order.subtotal), (submitted.shipping_cost, order.shipping_cost),
            (submitted.discount, order.discount), (submitted.total, order.total)]
    sent += [(a.price, b.price) for a, b in zip(submitted.cart_items, order.cart_items)]
    if any(_differs(a, b) for a, b in sent):
        logger.warning("rejected order with stale or altered totals from user %s", user_id)
        raise ValidationError("Order prices do not match the current catalog, please review your cart")
    return order


async def open_payment_session(db: AsyncIOMotorDatabase, gateway: PaymentGateway, req: PaymentInitRequest) -> str:
    url = await gateway.init_payment(req)
    await transition(db, req.order_id, OrderStatus.PAYMENT_PENDING, gatewayPageURL=url)
    return url


async def start_payment(db: AsyncIOMotorDatabase, gateway: PaymentGateway, req: PaymentInitRequest) -> str:
    """Payment handoff for an order already written in 'initiated'."""
    order = await db.orders.find_one({"_id": req.order_id})
    if not order or order.get("tran_id") != req.tran_id:
        raise NotFoundError("Order not found")
    if order.get("status") != OrderStatus.INITIATED.value:
        raise ValidationError(f"Order is already {order.get('status')}")
    if abs(req.total_amount - float(order.get("total", 0))) > 0.005:
        raise ValidationError("Payment amount does not match the order total")
    # the gateway charges the stored total
    req = req.model_copy(update={"total_amount": float(order["total"])})
    try:
        return await open_payment_session(db, gateway, req)
    except PaymentInitError:
        await transition(db, req.order_id, OrderStatus.EXPIRED, failureReason="payment init failed")
        raise


def _reservation_items(order: Order) -> list[tuple[str, str, int]]:
    return [(it.product_id, it.product_name, it.quantity) for it in order.cart_items]


async def _expire_without_restock(db: AsyncIOMotorDatabase, order_id: str) -> None:
    # stock is released by the reservation step's own compensator
    await db.orders.update_one(
        {"_id": order_id},
        {"$set": {"status": OrderStatus.EXPIRED.value, "failureReason": "checkout rolled back"}},
    )


def _order_saga(db: AsyncIOMotorDatabase, order: Order) -> Saga:
    return (
        Saga()
        .step("reserve stock", lambda _: reserve_stock(db, _reservation_items(order)),
              lambda reservations: release_stock(db, reservations))
        .step("insert order", lambda _: _insert(db, order),
              lambda order_id: _expire_without_restock(db, order_id))
    )


async def create_order(db: AsyncIOMotorDatabase, order: Order) -> str:
    """Reserve stock and write the order; the two steps roll back together."""
    saga = _order_saga(db, order)
    try:
        result = await saga.run()
    except SagaFailed as e:
        raise e.error
    return result.value


async def _insert(db: AsyncIOMotorDatabase, order: Order) -> str:
    await db.orders.insert_one(order.to_doc())
    return order.id


class CheckoutService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        gateway: PaymentGateway,
        analytics: AnalyticsSink,
        drafts: Optional[DraftSaveScheduler] = None,
    ) -> None:
        self.db = db
        self.gateway = gateway
        self.analytics = analytics
        self.drafts = drafts

    async def quote_pairs(self, pairs: list[CartPair], zone: str, coupon: Optional[str] = None) -> Quote:
        return await price_selection(self.db, pairs, zone, coupon)

    async def quote(self, user_id: str, zone: str, coupon: Optional[str] = None) -> Quote:
        pairs = await load_selected_lines(self.db, user_id)
        q = await price_selection(self.db, pairs, zone, coupon, strict=False)
        self.analytics.track(events.BEGIN_CHECKOUT, {
            "value": q.pricing.total,
            "items": events.items_payload(q.lines),
        })
        return q

    async def place_order(
        self,
        user_id: str,
        form: CheckoutForm,
        coupon: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> PlacedOrder:
        pairs = await load_selected_lines(self.db, user_id)
        if not pairs:
            raise ValidationError("Please select at least one product")

        # form and stock problems are reported before anything is priced or written
        validate_form(form)
        check_stock(pairs)

        q = await self.quote_pairs(pairs, form.shipping, coupon)
        order = build_order(form, q.lines, q.pricing, q.coupon, user_id=user_id, session_id=session_id)

        self.analytics.track(events.ORDER_CLICK, {
            "transaction_id": order.tran_id,
            "value": order.total,
            "payment": order.payment,
            "items": events.items_payload(order.cart_items),
        })

        if session_id:
            await self._drop_draft(session_id)

        saga = _order_saga(self.db, order)
        if order.payment == "online":
            saga.step("init payment", lambda _: open_payment_session(self.db, self.gateway, payment_request_for(order)))

        try:
            result = await saga.run()
        except SagaFailed as e:
            logger.warning("checkout for %s failed at %r (rollback complete: %s)",
                           order.tran_id, e.step_failed, e.rollback_complete)
            raise e.error

        await remove_lines(self.db, user_id, [pl.line.id for pl in q.lines])

        if order.payment == "online":
            order.status = OrderStatus.PAYMENT_PENDING.value
            return PlacedOrder(order=order, gateway_page_url=result.value)
        logger.info("cash order %s placed, total %s", order.tran_id, order.total)
        return PlacedOrder(order=order)

    async def _drop_draft(self, session_id: str) -> None:
        try:
            await delete_draft(self.db, session_id, self.drafts)
        except Exception:
            logger.exception("could not delete draft for session %s", session_id)


"""
Payment handoff to SSLCommerz.

The gateway opens a hosted payment session and answers with GatewayPageURL;
the storefront redirects the browser there. The gateway later calls back on
success/fail/cancel and the success callback is checked against the
validation API before the order is marked paid.
"""

import logging
from typing import Optional, Protocol

import httpx

from core.config import settings
from core.errors import PaymentInitError
from schemas.payment import PaymentInitRequest

logger = logging.getLogger(__name__)

SANDBOX_HOST = "https://sandbox.sslcommerz.com"
LIVE_HOST = "https://securepay.sslcommerz.com"
INIT_PATH = "/gwprocess/v4/api.php"
VALIDATION_PATH = "/validator/api/validationserverAPI.php"

VALID_STATUSES = frozenset({"VALID", "VALIDATED"})
CURRENCY = "BDT"


class PaymentGateway(Protocol):
    async def init_payment(self, req: PaymentInitRequest) -> str: ...

    async def validate(self, val_id: str, tran_id: str, amount: float) -> bool: ...


class SSLCommerzGateway:
    def __init__(
        self,
        store_id: str = settings.SSLCOMMERZ_STORE_ID,
        store_password: str = settings.SSLCOMMERZ_STORE_PASSWORD,
        sandbox: bool = settings.SSLCOMMERZ_SANDBOX,
        callback_base: str = settings.API_BASE_URL,
        timeout: float = settings.SSLCOMMERZ_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.store_id = store_id
        self.store_password = store_password
        self.host = SANDBOX_HOST if sandbox else LIVE_HOST
        self.callback_base = callback_base.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _session_form(self, req: PaymentInitRequest) -> dict:
        cb = self.callback_base
        return {
            "store_id": self.store_id,
            "store_passwd": self.store_password,
            "total_amount": f"{req.total_amount:.2f}",
            "currency": CURRENCY,
            "tran_id": req.tran_id,
            "value_a": req.order_id,
            "success_url": f"{cb}/sslcommerz/success/{req.tran_id}",
            "fail_url": f"{cb}/sslcommerz/fail/{req.tran_id}",
            "cancel_url": f"{cb}/sslcommerz/cancel/{req.tran_id}",
            "cus_name": req.full_name,
            "cus_email": req.email or "customer@example.com",
            "cus_add1": req.address,
            "cus_city": "Dhaka",
            "cus_country": "Bangladesh",
            "cus_phone": req.phone,
            "shipping_method": "Courier",
            "ship_name": req.full_name,
            "ship_add1": req.address,
            "ship_city": "Dhaka",
            "ship_postcode": "1000",
            "ship_country": "Bangladesh",
            "product_name": "Storefront order",
            "product_category": "General",
            "product_profile": "physical-goods",
        }

    async def init_payment(self, req: PaymentInitRequest) -> str:
        try:
            resp = await self._client.post(self.host + INIT_PATH, data=self._session_form(req))
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("SSLCommerz init failed for %s: %s", req.tran_id, e)
            raise PaymentInitError("Could not reach the payment gateway, please try again") from e

        url = body.get("GatewayPageURL")
        if not url:
            reason = body.get("failedreason") or "no gateway URL returned"
            logger.error("SSLCommerz rejected %s: %s", req.tran_id, reason)
            raise PaymentInitError(f"Payment initiation failed: {reason}")
        return url

    async def validate(self, val_id: str, tran_id: str, amount: float) -> bool:
        """True only for a settled payment of this transaction, in full."""
        params = {
            "val_id": val_id,
            "store_id": self.store_id,
            "store_passwd": self.store_password,
            "format": "json",
        }
        try:
            resp = await self._client.get(self.host + VALIDATION_PATH, params=params)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("SSLCommerz validation failed for %s: %s", val_id, e)
            return False
        if body.get("status") not in VALID_STATUSES:
            return False
        if body.get("tran_id") != tran_id:
            logger.warning("val_id %s belongs to %s, not %s", val_id, body.get("tran_id"), tran_id)
            return False
        if body.get("currency", CURRENCY) != CURRENCY:
            logger.warning("val_id %s was paid in %s", val_id, body.get("currency"))
            return False
        try:
            paid = float(body.get("amount"))
        except (TypeError, ValueError):
            return False
        if paid + 0.005 < amount:
            logger.warning("val_id %s paid %.2f of %.2f for %s", val_id, paid, amount, tran_id)
            return False
        return True

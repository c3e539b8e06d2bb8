# core/errors.py
import logging
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    """Base for every business-rule failure surfaced to the storefront."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CheckoutError):
    status_code = 422


class NotFoundError(CheckoutError):
    status_code = 404


class ProductUnavailableError(CheckoutError):
    status_code = 409

    def __init__(self, product_ids: Iterable[str]) -> None:
        self.product_ids = list(product_ids)
        super().__init__("Product unavailable: " + ", ".join(self.product_ids))


class OutOfStockError(CheckoutError):
    status_code = 409

    def __init__(self, product_names: Iterable[str]) -> None:
        self.product_names = list(product_names)
        super().__init__("Out of stock: " + ", ".join(self.product_names))


class CouponError(CheckoutError):
    status_code = 400


class PaymentInitError(CheckoutError):
    status_code = 502


class InvalidTransitionError(CheckoutError):
    status_code = 409

    def __init__(self, old_status: str, new_status: str) -> None:
        self.old_status = old_status
        self.new_status = new_status
        super().__init__(f"Cannot move order from '{old_status}' to '{new_status}'")


async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CheckoutError, checkout_error_handler)

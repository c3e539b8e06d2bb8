"""
Analytics sink for checkout funnel events (begin_checkout, order_click).

The storefront used to push these onto a global tag-manager array; here the
sink is passed in explicitly so it can be swapped or inspected.
"""

import logging
from typing import Any, Protocol

BEGIN_CHECKOUT = "begin_checkout"
ORDER_CLICK = "order_click"


class AnalyticsSink(Protocol):
    def track(self, event: str, payload: dict[str, Any]) -> None: ...


class LoggingAnalyticsSink:
    def __init__(self, logger_name: str = "analytics") -> None:
        self._logger = logging.getLogger(logger_name)

    def track(self, event: str, payload: dict[str, Any]) -> None:
        self._logger.info("event=%s payload=%s", event, payload)


class InMemoryAnalyticsSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def track(self, event: str, payload: dict[str, Any]) -> None:
        self.events.append((event, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


def items_payload(lines) -> list[dict[str, Any]]:
    """Tag-manager style item array from priced or frozen order lines."""
    return [
        {
            "item_id": line.product_id,
            "item_name": line.product_name,
            "price": line.price,
            "quantity": line.quantity,
        }
        for line in lines
    ]

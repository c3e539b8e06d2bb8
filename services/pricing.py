"""
Pricing calculator: subtotal, shipping cost, discount and grand total.

Pure functions over cart lines and product snapshots. Each line is priced
independently into either a PricedLine or a LineError; a total is only
produced when every line priced cleanly.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from core.errors import ProductUnavailableError
from schemas.cart import CartLine
from schemas.product import ProductSnapshot
from schemas.shipping import ShippingRate

CartPair = Tuple[CartLine, Optional[ProductSnapshot]]


@dataclass(frozen=True)
class PricedLine:
    line: CartLine
    product: ProductSnapshot

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def product_name(self) -> str:
        return self.product.name

    @property
    def price(self) -> float:
        return self.product.new_price

    @property
    def quantity(self) -> int:
        return self.line.quantity

    @property
    def line_total(self) -> float:
        return self.product.new_price * self.line.quantity


@dataclass(frozen=True)
class LineError:
    line: CartLine
    reason: str

    @property
    def product_id(self) -> str:
        return self.line.product_id


LineResult = Union[PricedLine, LineError]


@dataclass(frozen=True)
class Pricing:
    subtotal: float
    shipping_cost: float
    discount: float
    total: float
    free_shipping: bool


def price_line(line: CartLine, product: Optional[ProductSnapshot]) -> LineResult:
    if product is None:
        return LineError(line, "product not found")
    if product.id != line.product_id:
        return LineError(line, "product snapshot does not match cart line")
    if line.quantity <= 0:
        return LineError(line, "quantity must be positive")
    return PricedLine(line, product)


def price_lines(pairs: Sequence[CartPair]) -> list[PricedLine]:
    """Price every line or raise ProductUnavailableError naming the bad ones."""
    results = [price_line(line, product) for line, product in pairs]
    errors = [r for r in results if isinstance(r, LineError)]
    if errors:
        raise ProductUnavailableError(e.product_id for e in errors)
    return [r for r in results if isinstance(r, PricedLine)]


def shipping_cost_for(lines: Sequence[PricedLine], rate: ShippingRate, zone: str) -> float:
    # all([]) is True, an empty cart ships free
    if all(pl.product.free_shipping for pl in lines):
        return 0
    if zone == "inside":
        return rate.inside_dhaka
    return rate.outside_dhaka


def compute_pricing(
    pairs: Sequence[CartPair],
    rate: ShippingRate,
    zone: str,
    discount: float = 0,
) -> Pricing:
    lines = price_lines(pairs)
    return totals_for(lines, rate, zone, discount)


def totals_for(lines: Sequence[PricedLine], rate: ShippingRate, zone: str, discount: float = 0) -> Pricing:
    subtotal = sum(pl.line_total for pl in lines)
    free = all(pl.product.free_shipping for pl in lines)
    shipping_cost = shipping_cost_for(lines, rate, zone)
    # not clamped: a discount above subtotal + shipping yields a negative total
    total = subtotal + shipping_cost - discount
    return Pricing(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        discount=discount,
        total=total,
        free_shipping=free,
    )

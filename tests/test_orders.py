import pytest

from core.config import PLACEHOLDER_IMAGE_URL
from core.errors import ValidationError
from schemas.order import CheckoutForm, OrderStatus
from services.orders import build_order, freeze_line, normalize_phone, validate_form
from services.pricing import PricedLine, compute_pricing
from tests.factories import RATE, line, product


def form(**kw) -> CheckoutForm:
    data = dict(full_name="Rahim Uddin", phone="01712345678", address="Dhanmondi, Dhaka")
    data.update(kw)
    return CheckoutForm(**data)


@pytest.mark.parametrize("phone", ["01712345678", "01999999999", " 01812345678 "])
def test_valid_phones(phone):
    validate_form(form(phone=phone))


@pytest.mark.parametrize("phone", ["0171234567", "017123456789", "+8801712345678", "02712345678", "01712-345678", ""])
def test_invalid_phones(phone):
    with pytest.raises(ValidationError):
        validate_form(form(phone=phone))


@pytest.mark.parametrize("field", ["full_name", "address"])
def test_required_fields(field):
    with pytest.raises(ValidationError) as exc:
        validate_form(form(**{field: "  "}))
    assert "required" in exc.value.message


@pytest.mark.parametrize("raw, expected", [
    ("01712345678", "8801712345678"),
    ("8801712345678", "8801712345678"),
    ("+880 1712-345678", "8801712345678"),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_freeze_line_copies_catalog_values():
    ol = freeze_line(PricedLine(line(quantity=3, selected_color="Navy", selected_size="L"), product()))

    assert ol.product_id == "p1"
    assert ol.product_name == "Cotton Panjabi"
    assert ol.barcode == "BC-p1"
    assert ol.price == 500
    assert ol.purchase_price == 320
    assert (ol.color, ol.size, ol.quantity) == ("Navy", "L", 3)


def test_freeze_line_defaults():
    ol = freeze_line(PricedLine(line(), product()))
    assert (ol.color, ol.size) == ("Maroon", "M")

    bare = product(colors=[], sizes=[], images=[])
    ol = freeze_line(PricedLine(line(), bare))
    assert (ol.color, ol.size) == ("-", "-")
    assert ol.product_image == PLACEHOLDER_IMAGE_URL


@pytest.mark.parametrize("payment, status", [("cod", OrderStatus.PENDING), ("online", OrderStatus.INITIATED)])
def test_build_order(payment, status):
    pairs = [(line(quantity=2), product())]
    lines = [PricedLine(*pairs[0])]
    pricing = compute_pricing(pairs, RATE, "inside", discount=100)

    order = build_order(form(payment=payment, shipping="inside"), lines, pricing, coupon_code="EID100")

    assert order.status == status
    assert order.phone == "8801712345678"
    assert (order.subtotal, order.shipping_cost, order.discount, order.total) == (1000, 60, 100, 960)
    assert order.coupon == "EID100"
    assert order.tran_id.startswith("TXN-")
    assert order.id
    assert len(order.cart_items) == 1


def test_build_order_rejects_bad_form():
    pairs = [(line(), product())]
    with pytest.raises(ValidationError):
        build_order(form(phone="123"), [PricedLine(*pairs[0])], compute_pricing(pairs, RATE, "inside"))

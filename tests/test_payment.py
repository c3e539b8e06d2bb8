import httpx
import pytest

from core.errors import PaymentInitError
from schemas.payment import PaymentInitRequest
from services.payment import INIT_PATH, SANDBOX_HOST, VALIDATION_PATH, SSLCommerzGateway


@pytest.fixture
async def gateway():
    gw = SSLCommerzGateway(store_id="teststore", store_password="secret", sandbox=True,
                           callback_base="https://api.shop.test/")
    yield gw
    await gw.aclose()


def init_request():
    return PaymentInitRequest(
        tran_id="TXN-1", order_id="o1", total_amount=1060, full_name="Rahim Uddin",
        email="rahim@example.com", phone="8801712345678", address="Dhanmondi",
    )


async def test_init_returns_gateway_url(gateway, respx_mock):
    route = respx_mock.post(SANDBOX_HOST + INIT_PATH).mock(return_value=httpx.Response(
        200, json={"status": "SUCCESS", "GatewayPageURL": "https://sandbox.sslcommerz.com/EasyCheckOut/x"},
    ))

    url = await gateway.init_payment(init_request())

    assert url == "https://sandbox.sslcommerz.com/EasyCheckOut/x"
    sent = route.calls.last.request.content.decode()
    assert "tran_id=TXN-1" in sent
    assert "total_amount=1060.00" in sent
    assert "store_id=teststore" in sent
    assert "success_url=https%3A%2F%2Fapi.shop.test%2Fsslcommerz%2Fsuccess%2FTXN-1" in sent


async def test_missing_gateway_url_is_a_failure(gateway, respx_mock):
    respx_mock.post(SANDBOX_HOST + INIT_PATH).mock(return_value=httpx.Response(
        200, json={"status": "FAILED", "failedreason": "Store Credential Error"},
    ))

    with pytest.raises(PaymentInitError) as exc:
        await gateway.init_payment(init_request())
    assert "Store Credential Error" in exc.value.message


async def test_transport_error_is_a_failure(gateway, respx_mock):
    respx_mock.post(SANDBOX_HOST + INIT_PATH).mock(side_effect=httpx.ConnectError("refused"))
    with pytest.raises(PaymentInitError):
        await gateway.init_payment(init_request())


def validation_reply(respx_mock, **overrides):
    body = {"status": "VALID", "tran_id": "TXN-1", "amount": "1060.00", "currency": "BDT"}
    body.update(overrides)
    respx_mock.get(url__startswith=SANDBOX_HOST + VALIDATION_PATH).mock(return_value=httpx.Response(200, json=body))


@pytest.mark.parametrize("status, ok", [("VALID", True), ("VALIDATED", True), ("INVALID_TRANSACTION", False)])
async def test_validate(gateway, respx_mock, status, ok):
    validation_reply(respx_mock, status=status)
    assert await gateway.validate("val-1", "TXN-1", 1060) is ok


async def test_validation_for_another_transaction(gateway, respx_mock):
    validation_reply(respx_mock, tran_id="TXN-OTHER")
    assert await gateway.validate("val-1", "TXN-1", 1060) is False


async def test_underpaid_validation(gateway, respx_mock):
    validation_reply(respx_mock, amount="1.00")
    assert await gateway.validate("val-1", "TXN-1", 1060) is False


async def test_validation_in_another_currency(gateway, respx_mock):
    validation_reply(respx_mock, currency="USD")
    assert await gateway.validate("val-1", "TXN-1", 1060) is False


async def test_validation_gateway_down(gateway, respx_mock):
    respx_mock.get(url__startswith=SANDBOX_HOST + VALIDATION_PATH).mock(side_effect=httpx.ConnectError("refused"))
    assert await gateway.validate("val-1", "TXN-1", 1060) is False

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from core.errors import PaymentInitError
from core.security import create_access_token
from db import get_db
from main import app
from services.analytics import InMemoryAnalyticsSink
from services.drafts import DraftSaveScheduler, save_draft

BUYER = {"_id": "u1", "email": "buyer@example.com", "fullName": "Rahim Uddin", "role": "user"}
ADMIN = {"_id": "a1", "email": "admin@example.com", "fullName": "Store Admin", "role": "admin"}


class FakeGateway:
    def __init__(self) -> None:
        self.url = "https://sandbox.sslcommerz.com/EasyCheckOut/testcde"
        self.fail = False
        self.valid = True
        self.requests = []
        self.validations = []

    async def init_payment(self, req):
        self.requests.append(req)
        if self.fail:
            raise PaymentInitError("Payment initiation failed: store is inactive")
        return self.url

    async def validate(self, val_id, tran_id, amount):
        self.validations.append((val_id, tran_id, amount))
        return self.valid


@pytest.fixture
def db():
    return AsyncMongoMockClient()["storefront_test"]


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def analytics():
    return InMemoryAnalyticsSink()


@pytest.fixture
async def scheduler(db):
    s = DraftSaveScheduler(lambda draft: save_draft(db, draft), delay=0.05)
    yield s
    await s.shutdown()


@pytest.fixture
async def client(db, gateway, analytics, scheduler):
    async def override_db():
        return db

    app.dependency_overrides[get_db] = override_db
    app.state.analytics = analytics
    app.state.gateway = gateway
    app.state.draft_scheduler = scheduler

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def buyer_client(client, db):
    await db.users.insert_one(dict(BUYER))
    client.cookies.set("access_token", create_access_token({"sub": BUYER["email"]}))
    return client


@pytest.fixture
async def admin_client(client, db):
    await db.users.insert_one(dict(ADMIN))
    client.cookies.set("access_token", create_access_token({"sub": ADMIN["email"]}))
    return client

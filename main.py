from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import FRONTEND_URL
from core.errors import register_error_handlers
from core.logging import setup_logging
from db import close_client, get_db
from routers import router as api_router
from services.analytics import LoggingAnalyticsSink
from services.drafts import DraftSaveScheduler, save_draft
from services.payment import SSLCommerzGateway

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = await get_db()
    gateway = SSLCommerzGateway()
    app.state.analytics = LoggingAnalyticsSink()
    app.state.gateway = gateway
    app.state.draft_scheduler = DraftSaveScheduler(lambda draft: save_draft(db, draft))
    yield
    await app.state.draft_scheduler.shutdown()
    await gateway.aclose()
    close_client()


app = FastAPI(
    title="Storefront Checkout API",
    description="Cart, checkout and payment handoff for the storefront",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,    # access_token cookie
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(api_router)

@app.get("/")
async def root():
    return {"message": "Storefront Checkout API is running"}

# core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    MONGO_URL: str = "mongodb://localhost:27017"
    DB_NAME: str = "storefront"

    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    FRONTEND_URL: str = "http://localhost:5173"
    API_BASE_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"

    # checkout
    COUNTRY_CODE: str = "88"
    PLACEHOLDER_IMAGE_URL: str = "https://via.placeholder.com/150"
    DEFAULT_INSIDE_DHAKA: float = 60
    DEFAULT_OUTSIDE_DHAKA: float = 120
    DRAFT_SAVE_DELAY_SECONDS: float = 2.0
    PAYMENT_PENDING_TTL_MINUTES: int = 30

    # SSLCommerz
    SSLCOMMERZ_STORE_ID: str = "testbox"
    SSLCOMMERZ_STORE_PASSWORD: str = "qwerty"
    SSLCOMMERZ_SANDBOX: bool = True
    SSLCOMMERZ_TIMEOUT_SECONDS: float = 15.0


settings = Settings()

MONGO_URL = settings.MONGO_URL
DB_NAME = settings.DB_NAME
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
FRONTEND_URL = settings.FRONTEND_URL
API_BASE_URL = settings.API_BASE_URL
LOG_LEVEL = settings.LOG_LEVEL
COUNTRY_CODE = settings.COUNTRY_CODE
PLACEHOLDER_IMAGE_URL = settings.PLACEHOLDER_IMAGE_URL
DEFAULT_INSIDE_DHAKA = settings.DEFAULT_INSIDE_DHAKA
DEFAULT_OUTSIDE_DHAKA = settings.DEFAULT_OUTSIDE_DHAKA
DRAFT_SAVE_DELAY_SECONDS = settings.DRAFT_SAVE_DELAY_SECONDS
PAYMENT_PENDING_TTL_MINUTES = settings.PAYMENT_PENDING_TTL_MINUTES

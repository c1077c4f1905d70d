from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://app:devpassword@db:5432/artmarket"
    REDIS_URL: str = "redis://redis:6379/0"

    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    CURRENCY: str = "gbp"

    JWT_SECRET_KEY: str = ""
    JWT_AUDIENCE: str = "authenticated"

    STORAGE_PUBLIC_URL: str = "http://localhost:54321"
    STORAGE_BUCKET: str = "artwork"

    SERVICE_FEE_RATE: Decimal = Decimal("0.08")
    MIN_OFFER_RATIO: Decimal = Decimal("0.6")

    APP_ENV: str = "development"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

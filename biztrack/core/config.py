# biztrack/core/config.py

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./biztrack.db"

    # Billing
    TAX_RATE: Decimal = Decimal("0.07")
    LOW_STOCK_THRESHOLD: int = 5
    DEFAULT_PAYMENT_METHOD: str = "cash"
    CURRENCY_SYMBOL: str = "Rs"

    # Billing API client
    API_BASE_URL: str = "http://localhost:8000"
    API_TIMEOUT: int = 10

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()

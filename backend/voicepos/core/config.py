import secrets
from decimal import Decimal

from pydantic_settings import BaseSettings


def _generate_secret() -> str:
    """Generate a random secret key if none is provided via env."""
    return secrets.token_urlsafe(64)


class Settings(BaseSettings):
    PROJECT_NAME: str = "Voice POS"
    STORE_NAME: str = "Main Store"
    LOG_LEVEL: str = "INFO"

    # Auth
    SECRET_KEY: str = _generate_secret()  # MUST be set via .env in production
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480  # 8 hours (1 shift)
    ALGORITHM: str = "HS256"

    # Catalog store: "memory" keeps everything in-process, "sql" goes through SQLAlchemy
    CATALOG_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./voicepos.db"
    SEED_SAMPLE_DATA: bool = True

    # Money
    CURRENCY_SYMBOL: str = "$"
    DEFAULT_TAX_RATE: Decimal = Decimal("0.10")
    STORE_TAX_RATES: dict[str, Decimal] = {}

    # Checkout
    PAYMENT_METHODS: list[dict[str, str]] = [
        {"id": "cash", "name": "Cash"},
        {"id": "credit-card", "name": "Credit Card"},
        {"id": "debit-card", "name": "Debit Card"},
        {"id": "mobile-payment", "name": "Mobile Payment"},
        {"id": "credit", "name": "Store Credit"},
    ]
    DEFAULT_PAYMENT_METHOD: str = "cash"
    CREDIT_PAYMENT_METHOD: str = "credit"
    PAYMENT_PROCESSING_DELAY: float = 1.5

    # Voice
    VOICE_MATCH_THRESHOLD: float = 0.7
    VOICE_RESTART_DELAY: float = 0.3

    MAX_UPLOAD_SIZE_MB: int = 5

    class Config:
        env_file = ".env"


settings = Settings()

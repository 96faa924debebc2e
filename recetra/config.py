"""
Application settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/recetra.db"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # File storage
    DATA_DIR: str = "./data"

    # Receipt numbering: OR-<year>-<sequence>
    RECEIPT_PREFIX: str = "OR"
    RECEIPT_SEQUENCE_WIDTH: int = 6
    MINT_MAX_ATTEMPTS: int = 5

    # Verification (artificial round-trip latency, seconds)
    VERIFY_DELAY_SECONDS: float = 0.0

    # Dispatch
    DISPATCH_TIMEOUT_SECONDS: float = 10.0
    MOCK_DISPATCH_DELAY_SECONDS: float = 0.5
    MOCK_PAYMENT_SUCCESS_RATE: float = 0.9
    MOCK_EMAIL_SUCCESS_RATE: float = 0.95
    MOCK_SMS_SUCCESS_RATE: float = 0.9
    MOCK_RANDOM_SEED: Optional[int] = None

    # Startup data
    SEED_REFERENCE_DATA: bool = True
    SEED_SAMPLE_RECEIPTS: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

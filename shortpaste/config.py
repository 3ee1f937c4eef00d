"""
Configuration module for Shortpaste.
Loads environment variables and provides config objects.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    ALLOW_MEMORY_FALLBACK: bool = _flag("ALLOW_MEMORY_FALLBACK", "True")
    USE_MEMORY_STORE: bool = _flag("USE_MEMORY_STORE", "0")
    DEBUG: bool = _flag("DEBUG", "True")
    APP_DOMAIN: str = os.getenv("APP_DOMAIN", "http://localhost:8000")
    TEST_MODE: bool = _flag("TEST_MODE", "0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Identifier allocation
    SHORT_ID_LENGTH: int = int(os.getenv("SHORT_ID_LENGTH", "8"))
    CREATE_MAX_ATTEMPTS: int = int(os.getenv("CREATE_MAX_ATTEMPTS", "5"))

    # Expired paste reclamation, 0 disables the in-process loop
    SWEEP_INTERVAL_SECONDS: int = int(os.getenv("SWEEP_INTERVAL_SECONDS", "3600"))


settings = Settings()

"""
Application configuration.

Values come from the environment (a local .env is loaded once here).
`create_app(test_config)` can override any key.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _database_url():
    return os.getenv("DATABASE_URL") or None


class Config:
    """Defaults read from the environment at import time."""

    JWT_SECRET = os.getenv("JWT_SECRET")
    JWT_ALGORITHM = "HS256"
    TOKEN_EXPIRATION_DAYS = int(os.getenv("TOKEN_EXPIRATION_DAYS", 7))

    DATABASE_URL = _database_url()
    # Without a DSN we fall back to the in-process store
    STORE_BACKEND = os.getenv("STORE_BACKEND") or ("postgres" if DATABASE_URL else "memory")
    DB_POOL_MIN = int(os.getenv("DB_POOL_MIN", 1))
    DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", 10))

    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    GATEWAY_PORT = int(os.getenv("GATEWAY_PORT", 5000))

    MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", 6))

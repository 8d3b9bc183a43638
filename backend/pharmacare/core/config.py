"""Data store configuration.

Environment variables override all defaults.
The admin seed password should be supplied via .env in any shared install.
"""

import os
from pathlib import Path

from dotenv import load_dotenv


# Load .env for local development (no-op if the file is missing)
_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmacare.db")
    # Seconds a writer waits on SQLite's lock before giving up
    DB_BUSY_TIMEOUT_SECONDS: float = float(os.getenv("DB_BUSY_TIMEOUT_SECONDS", "30"))
    SQL_ECHO: bool = _env_bool("SQL_ECHO")

    # Seeded administrator (migration 2)
    DEFAULT_ADMIN_USERNAME: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    # Empty means: generate a random password at seed time and log it once
    DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "")

    # Password Policy
    MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "8"))

    # Invoice numbering: INV-000001
    INVOICE_NUMBER_PADDING: int = int(os.getenv("INVOICE_NUMBER_PADDING", "6"))

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DEBUG: bool = ENVIRONMENT == "development"


settings = Settings()

"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from club_finance.config import settings
    print(settings.DATABASE_URL)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Club Finance API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Club Finance API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # Ledger documents live in a single key/value table. SQLite by default;
    # any async SQLAlchemy URL works (e.g. postgresql+asyncpg://...).
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/club_finance.db"

    # --- Ledgers ---
    # Ledger type used by the bank import when the request names none
    DEFAULT_LEDGER_TYPE: str = "BANK"
    # How many months back a ledger read searches for a previous closing balance
    LEDGER_LOOKBACK_MONTHS: int = 6

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()

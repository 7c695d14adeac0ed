"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env
file as a fallback. The .env file is gitignored; .env.example is the template.

Precedence (highest first):
  1. Environment variables
  2. .env file values
  3. Defaults defined here

Usage:
    from bankapp.config import settings
    print(settings.DATABASE_URL)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the ledger API.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to verify the bearer tokens issued by the identity service
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Online Banking Ledger API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # SQLite for the demo; a PostgreSQL URL (asyncpg driver) works unchanged
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/bank.db"

    # --- Authentication ---
    # REQUIRED: No default, tokens must be signed with a real shared secret
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()

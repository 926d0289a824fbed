"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. This pattern keeps secrets out of source code — the .env file is
gitignored, and .env.example provides a safe template for developers.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from app.config import settings
    print(settings.SESSION_FALLBACK_TIMEOUT_SECONDS)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for CreditScore Pro.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign session access tokens
      - VERIFICATION_CODE_ENCRYPTION_KEY: Fernet key for the audit copy of
        bank verification codes stored on profiles
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "CreditScore Pro"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # SQLite for MVP; swap to PostgreSQL connection string for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/creditscore.db"

    # --- Credential store ---
    # REQUIRED: No default, so a real secret must be set
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # When True, the credential store creates a stub profile row as part of
    # signup, the way a hosted auth service's "new user" trigger does.
    PROFILE_STUB_ON_SIGNUP: bool = True

    # --- Verification code audit ---
    # REQUIRED: Fernet key for encrypting the last verification code used
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    VERIFICATION_CODE_ENCRYPTION_KEY: str

    # --- Session manager ---
    # Bootstrap fails open to "logged out" if the credential store has not
    # answered within this many seconds.
    SESSION_FALLBACK_TIMEOUT_SECONDS: float = 3.0

    # --- CORS ---
    # Origins allowed to make cross-origin requests (frontend URLs)
    ALLOWED_ORIGINS: list[str] = ["http://localhost:5173"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()

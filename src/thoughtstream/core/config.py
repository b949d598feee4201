"""
Application Configuration

Centralized settings management using Pydantic BaseSettings.
All values are loaded from environment variables or .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable binding.

    Optional env vars:
        DATABASE_URL (local SQLite file), LOG_LEVEL (INFO),
        OCR_LANGUAGE (eng), SPEECH_LANGUAGE (en-US),
        SPEECH_AUTHORIZED (True), EXTRACTION_TIMEOUT (60.0)
    """

    PROJECT_NAME: str = "ThoughtStream"

    # Database - any SQLAlchemy async URL (sqlite+aiosqlite, postgresql+asyncpg)
    DATABASE_URL: str = "sqlite+aiosqlite:///./thoughtstream.db"

    # Extraction
    OCR_LANGUAGE: str = "eng"
    SPEECH_LANGUAGE: str = "en-US"
    SPEECH_AUTHORIZED: bool = True
    EXTRACTION_TIMEOUT: float = 60.0

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",  # Silently ignore unknown env vars
    )

    @property
    def is_sqlite(self) -> bool:
        """True when the configured store is an embedded SQLite database."""
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()

"""Application configuration."""

import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    database_path: str = os.getenv("DATABASE_PATH", "data/goals.db")

    # Display
    dot_size: int = int(os.getenv("DOT_SIZE", "40"))  # 20px dot + 10px margin on each side

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False


settings = Settings()

"""
Configuration settings for the Rankify backend.
Loads environment variables and provides application-wide settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Platform Configuration
    PLATFORM_BASE_URL: str = "https://api.puter.com"
    PLATFORM_API_TOKEN: Optional[str] = None
    PLATFORM_USERNAME: Optional[str] = None
    PLATFORM_PASSWORD: Optional[str] = None
    PLATFORM_TIMEOUT: int = 120  # seconds; AI calls on large PDFs are slow

    # Readiness detection
    PLATFORM_POLL_INTERVAL_MS: int = 100
    PLATFORM_LOAD_TIMEOUT_MS: int = 10_000

    # Inference Configuration
    FEEDBACK_MODEL: str = "claude-sonnet-4"

    # Storage Configuration
    RESUME_KEY_PREFIX: str = "resume:"
    MAX_FINISHED_ANALYSES: int = 500  # finished run statuses kept for polling

    # Processing Configuration
    PDF_RENDER_SCALE: float = 4.0
    MAX_FILE_SIZE: int = 20 * 1024 * 1024  # 20 MB
    SUPPORTED_FILE_TYPES: List[str] = [".pdf"]

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()

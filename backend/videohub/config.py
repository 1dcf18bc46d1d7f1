"""Application configuration management."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./videohub.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Security (tokens are issued by the auth service; we only verify them)
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Feeds
    FEED_DEFAULT_PAGE_SIZE: int = 10
    FEED_MAX_PAGE_SIZE: int = 100
    VIDEO_SEARCH_FIELDS: str = "title,description"

    # Policy flags
    ALLOW_SELF_SUBSCRIPTION: bool = True

    # Error tracking / alerting (optional)
    SENTRY_DSN: str = ""
    PAGERDUTY_INTEGRATION_KEY: str = ""
    APP_VERSION: str = "1.0.0"

    # Application
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True
    )

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS comma-separated string into list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def video_search_fields_list(self) -> List[str]:
        """Parse VIDEO_SEARCH_FIELDS comma-separated string into list."""
        return [field.strip() for field in self.VIDEO_SEARCH_FIELDS.split(",") if field.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


# Global settings instance
settings = Settings()

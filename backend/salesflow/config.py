"""Application configuration."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "SalesFlow"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Database (holds the single state document)
    DATABASE_URL: str = "sqlite:///./salesflow.db"
    # Bumping the key abandons previously persisted state; there is no migration.
    STATE_KEY: str = "sales_flow_state_v6"

    # JWT
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Password policy
    PASSWORD_MIN_LENGTH: int = 8
    DEFAULT_USER_PASSWORD: str = "password123"

    # Purchase order attachments (image data URLs)
    MAX_PO_FILE_SIZE: int = 5242880  # 5MB
    ALLOWED_PO_MIME_TYPES: str = "image/jpeg,image/png,image/webp,image/gif"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def allowed_po_mime_types_list(self) -> list[str]:
        """Get allowed PO mime types as list."""
        return [mime.strip() for mime in self.ALLOWED_PO_MIME_TYPES.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from the environment (and `.env`)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Service
    SERVICE_NAME: str = "inventory-api"
    VERSION: str = "1.1.0"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # Authentication
    JWT_SECRET: str = "change-this-secret-in-the-env-file"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 24 * 60
    AUTH_REQUIRED: bool = False

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024

    # API client
    API_BASE_URL: str = "http://localhost:8000/api"
    API_TIMEOUT: float = 10.0


@lru_cache
def get_settings() -> Settings:
    return Settings()

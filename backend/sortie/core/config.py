from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = "Sortie Unique"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./sortie.db"

    SECRET_KEY: str = Field(default="change-me-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # uploaded objects live under STORAGE_ROOT and are served from STORAGE_PUBLIC_URL
    STORAGE_ROOT: str = str(PACKAGE_DIR / "static" / "uploads")
    STORAGE_PUBLIC_URL: str = "/static/uploads"

    # when True an existing but disabled coupon is reported as "inactive"
    # instead of "not_found"
    COUPON_REVEAL_INACTIVE: bool = False

    DEFAULT_LANGUAGE: str = "en"
    CURRENCY: str = "DZD"

    SHEETS_WEBHOOK_URL: Optional[str] = None
    SHEETS_TIMEOUT: int = 10

    ADMIN_EMAIL: str = "admin@sortie-unique.dz"
    ADMIN_PASSWORD: str = "12345678"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

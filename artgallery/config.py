from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # General
    environment: Literal["production", "development"] = Field("development", alias="ENVIRONMENT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    production_origin: str = Field(
        "https://kashishartindia-full-stack.onrender.com", alias="PRODUCTION_ORIGIN"
    )
    development_origin: str = Field("http://localhost:5000", alias="DEVELOPMENT_ORIGIN")
    frontend_url: Optional[str] = Field(default=None, alias="FRONTEND_URL")

    # Local uploads
    uploads_dir: Path = Field(Path("uploads"), alias="UPLOADS_DIR")
    max_file_size: int = Field(
        10 * 1024 * 1024, alias="MAX_FILE_SIZE", description="Maximum upload size in bytes."
    )

    # Cloudinary
    use_cloudinary: bool = Field(False, alias="USE_CLOUDINARY")
    cloudinary_cloud_name: Optional[str] = Field(default=None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: Optional[str] = Field(default=None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: Optional[str] = Field(default=None, alias="CLOUDINARY_API_SECRET")
    cloudinary_folder: str = Field("kashish_art_india", alias="CLOUDINARY_FOLDER")

    # Firebase
    document_store: Literal["firebase", "memory"] = Field("firebase", alias="DOCUMENT_STORE")
    firebase_credentials_json: Optional[str] = Field(
        default=None,
        alias="GOOGLE_APPLICATION_CREDENTIALS",
        description="Path to service-account JSON file or JSON string itself.",
    )
    firebase_database_url: Optional[str] = Field(default=None, alias="FIREBASE_DATABASE_URL")

    # Admin auth
    admin_email: str = Field("admin@kashishartindia.com", alias="ADMIN_EMAIL")
    admin_password: str = Field("change-me", alias="ADMIN_PASSWORD")
    jwt_secret: str = Field("change-me-too", alias="JWT_SECRET")
    jwt_expire_hours: int = Field(24 * 7, alias="JWT_EXPIRE_HOURS")

    # Email (SMTP)
    smtp_host: Optional[str] = Field(default=None, alias="EMAIL_HOST")
    smtp_port: int = Field(465, alias="EMAIL_PORT")
    smtp_username: Optional[str] = Field(default=None, alias="EMAIL_USERNAME")
    smtp_password: Optional[str] = Field(default=None, alias="EMAIL_PASSWORD")
    smtp_use_ssl: bool = Field(True, alias="EMAIL_USE_SSL")
    email_from: str = Field("info@kashishartindia.com", alias="EMAIL_FROM")
    email_from_name: str = Field("Kashish Art India", alias="EMAIL_FROM_NAME")
    notification_email: str = Field("info@kashishartindia.com", alias="NOTIFICATION_EMAIL")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def host_prefix(self) -> str:
        """Origin that locally stored uploads are served from."""
        origin = self.production_origin if self.is_production else self.development_origin
        return origin.rstrip("/")


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()

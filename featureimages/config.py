from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Security
    admin_token: str = Field(..., description="Token expected in the Admin-Token header of mutating routes.")

    # General
    project_id: Optional[str] = Field(default=None, description="GCP project ID")
    site_base_url: str = Field(
        "http://localhost:8000",
        description="Protocol and host of the site; stripped from image URLs written to CSS.",
    )
    log_level: str = Field("INFO")

    # Firebase
    firebase_credentials_json: Optional[str] = Field(
        default=None,
        validation_alias="GOOGLE_APPLICATION_CREDENTIALS",
        description="Path to service-account JSON file or JSON string itself.",
    )
    page_store_backend: Literal["firebase", "memory"] = Field("firebase")

    # Asset storage
    storage_backend: Literal["gcs", "local"] = Field("gcs")
    bucket_name: str = Field("feature-images-assets")
    public_assets: bool = Field(True, description="If true, uploaded blobs are made public.")
    assets_path: str = Field("assets", description="Root directory of the local storage backend.")

    # Feature images
    feature_images_root: str = Field("feature-images/", description="Folder holding one sub-folder per page.")
    css_include_name: str = Field("include.css", description="File name of the generated CSS in each page folder.")
    enable_cms_fields: bool = Field(True)

    # Image processing
    compress_uploads: bool = Field(False)
    image_max_dim: int = Field(1920, description="Maximum width or height for compressed uploads (pixels).")
    image_quality: int = Field(85, ge=1, le=100, description="JPEG quality for compressed uploads (1-100).")


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()

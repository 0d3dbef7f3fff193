from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .image_reference import ImageReference


class FeatureImageOptions(BaseModel):
    """Optional feature image behaviours enabled for a page."""

    enabled: bool = True
    show_accessible_description: bool = False
    show_mobile: bool = False
    show_text: bool = False


class Page(BaseModel):
    """A content page carrying feature images."""

    id: int = Field(..., ge=1)
    title: str = ""
    url_segment: str = Field(..., min_length=1)
    feature_text: str | None = None
    featured_image_text: str | None = None  # Accessible description of text on the image
    feature_image_large: ImageReference | None = None
    feature_image_medium: ImageReference | None = None
    feature_image_small: ImageReference | None = None
    feature_image_mobile: ImageReference | None = None
    options: FeatureImageOptions = FeatureImageOptions()
    updated_at: datetime | None = None


class PageUpdate(BaseModel):
    """Editable page fields accepted by the API."""

    title: str | None = None
    url_segment: str | None = Field(default=None, min_length=1)
    feature_text: str | None = None
    featured_image_text: str | None = None
    options: FeatureImageOptions | None = None

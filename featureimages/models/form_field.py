from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

FEATURE_IMAGES_TAB = "Root.FeatureImages"


class FormField(BaseModel):
    """Description of a CMS form field, rendered by the CMS front end."""

    name: str
    title: str
    kind: Literal["upload", "text", "textarea"]
    tab: str = FEATURE_IMAGES_TAB
    description: str | None = None
    folder_name: str | None = None  # Upload destination, relative to the asset root

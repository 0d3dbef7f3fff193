from __future__ import annotations

from pydantic import BaseModel, Field


class ImageReference(BaseModel):
    """An uploaded image as stored in the asset store."""

    id: str = ""
    url: str = ""  # Absolute URL, host included
    path: str = ""  # Key in the asset store
    filename: str | None = None
    mime_type: str | None = None
    width: int | None = Field(default=None, ge=1)
    height: int | None = Field(default=None, ge=1)

    @property
    def present(self) -> bool:
        return bool(self.id)

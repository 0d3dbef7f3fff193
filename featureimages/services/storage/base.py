from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from typing import List, Tuple
from uuid import uuid4

from PIL import Image, UnidentifiedImageError

from featureimages.config import Settings
from featureimages.models import ImageReference

logger = logging.getLogger(__name__)


class AssetStorageError(RuntimeError):
    """Raised when the asset store cannot complete an operation."""


class AssetStorage(ABC):
    """Abstract interface for the store holding feature images and CSS files.

    Paths are keys relative to the asset root using ``/`` separators. Folder
    paths end with a trailing slash.
    """

    name: str = "abstract"

    _VALID_IMAGE_PREFIX = "image/"
    _MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MB

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def save_bytes(self, path: str, data: bytes, *, content_type: str) -> None:
        ...

    @abstractmethod
    def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove *path*; missing paths are ignored."""

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Absolute URL under which *path* is served."""

    @abstractmethod
    def make_folder(self, path: str) -> None:
        ...

    @abstractmethod
    def list_folders(self, prefix: str) -> List[str]:
        """Return the folder paths directly below *prefix*."""

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    def save_text(self, path: str, text: str, *, content_type: str = "text/css") -> None:
        self.save_bytes(path, text.encode("utf-8"), content_type=content_type)

    def upload_image(
        self,
        file_bytes: bytes,
        folder: str,
        stem: str,
        *,
        content_type: str,
        filename: str | None = None,
        compress: bool | None = None,
    ) -> ImageReference:
        """Store an uploaded image as ``{folder}{stem}.{ext}``.

        Parameters
        ----------
        file_bytes : bytes
            Raw image bytes as received from the uploader.
        folder : str
            Destination folder, with a trailing slash.
        stem : str
            File name without extension.
        content_type : str
            Mime type, must start with ``image/``.
        filename : str, optional
            Original file name, kept on the reference for display.
        compress : bool, optional
            Resize/compress to ``image_max_dim`` and ``image_quality``.
            Defaults to the ``compress_uploads`` setting.
        """

        if not content_type.startswith(self._VALID_IMAGE_PREFIX):
            raise ValueError("Unsupported content_type; expected image/*, got %s" % content_type)

        if len(file_bytes) > self._MAX_UPLOAD_BYTES:
            raise ValueError("Image exceeds 10 MB size limit.")

        width, height = _read_dimensions(file_bytes)

        data_to_upload = file_bytes
        final_content_type = content_type
        if compress is None:
            compress = self._settings.compress_uploads
        if compress:
            try:
                data_to_upload, final_content_type, (width, height) = _compress_image(
                    file_bytes,
                    max_dim=self._settings.image_max_dim,
                    quality=self._settings.image_quality,
                )
            except OSError as exc:  # pragma: no cover
                logger.warning("Image compression failed, uploading original bytes: %s", exc)

        ext = _content_type_to_extension(final_content_type)
        path = f"{folder}{stem}.{ext}"
        self.save_bytes(path, data_to_upload, content_type=final_content_type)
        logger.debug("Uploaded image to %s (%dx%d)", path, width, height)

        return ImageReference(
            id=uuid4().hex,
            url=self.public_url(path),
            path=path,
            filename=filename,
            mime_type=final_content_type,
            width=width,
            height=height,
        )


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------

def _content_type_to_extension(content_type: str) -> str:
    mapping = {
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
    }
    return mapping.get(content_type.lower(), "jpg")


def _read_dimensions(file_bytes: bytes) -> Tuple[int, int]:
    try:
        with Image.open(io.BytesIO(file_bytes)) as img:
            return img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise ValueError("Uploaded file is not a readable image.") from exc


def _compress_image(
    file_bytes: bytes,
    *,
    max_dim: int,
    quality: int,
) -> Tuple[bytes, str, Tuple[int, int]]:
    """Resize/compress image bytes using Pillow and return (bytes, content_type, size)."""

    with Image.open(io.BytesIO(file_bytes)) as img:
        img = img.convert("RGB")  # ensure RGB for JPEG
        # Resize preserving aspect ratio if necessary
        width, height = img.size
        if max(width, height) > max_dim:
            img.thumbnail((max_dim, max_dim))
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality, optimize=True)
        return buffer.getvalue(), "image/jpeg", img.size

"""Google Cloud Storage backend.

Objects are stored under the following key pattern:

    {feature_images_root}{page_id}_{url_segment}/{file}

GCS has no real folders; a folder is a zero-byte object whose name ends in
a slash, the same marker the Cloud Console creates.
"""
from __future__ import annotations

import logging
from typing import Any, List

from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage

from featureimages.config import Settings

from .base import AssetStorage, AssetStorageError

logger = logging.getLogger(__name__)


class GCSAssetStorage(AssetStorage):
    """Wrapper around Google Cloud Storage uploads and public URLs."""

    name = "gcs"

    def __init__(self, settings: Settings, *, bucket: Any = None) -> None:
        super().__init__(settings)
        if bucket is None:
            client = storage.Client(project=settings.project_id)
            bucket = client.bucket(settings.bucket_name)
            if not bucket.exists():  # pragma: no cover
                logger.warning("GCS bucket '%s' does not exist or access denied.", settings.bucket_name)
        self._bucket = bucket

    def save_bytes(self, path: str, data: bytes, *, content_type: str) -> None:
        blob = self._bucket.blob(path)
        try:
            blob.upload_from_string(data, content_type=content_type)
        except GoogleAPIError as exc:
            raise AssetStorageError(f"Upload of {path} failed: {exc}") from exc

        if self._settings.public_assets:
            try:
                blob.make_public()
            except GoogleAPIError as exc:  # pragma: no cover
                logger.error("Failed to make blob %s public: %s", path, exc)
        logger.debug("Wrote gs://%s/%s", self._settings.bucket_name, path)

    def exists(self, path: str) -> bool:
        try:
            return self._bucket.blob(path).exists()
        except GoogleAPIError as exc:
            raise AssetStorageError(f"Lookup of {path} failed: {exc}") from exc

    def delete(self, path: str) -> None:
        blob = self._bucket.blob(path)
        try:
            if blob.exists():
                blob.delete()
                logger.debug("Deleted blob %s", blob.name)
        except GoogleAPIError as exc:
            raise AssetStorageError(f"Delete of {path} failed: {exc}") from exc

    def public_url(self, path: str) -> str:
        return self._bucket.blob(path).public_url

    def make_folder(self, path: str) -> None:
        marker = path if path.endswith("/") else path + "/"
        if not self.exists(marker):
            self.save_bytes(marker, b"", content_type="application/x-directory")

    def list_folders(self, prefix: str) -> List[str]:
        try:
            iterator = self._bucket.list_blobs(prefix=prefix, delimiter="/")
            # Prefixes are only populated once the pages have been consumed.
            for _ in iterator:
                pass
            return sorted(iterator.prefixes)
        except GoogleAPIError as exc:
            raise AssetStorageError(f"Listing of {prefix} failed: {exc}") from exc

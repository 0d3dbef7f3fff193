from __future__ import annotations

from functools import lru_cache

from featureimages.config import get_settings

from .base import AssetStorage
from .gcs import GCSAssetStorage
from .local import LocalAssetStorage

_BACKENDS: dict[str, type[AssetStorage]] = {
    "gcs": GCSAssetStorage,
    "local": LocalAssetStorage,
}


@lru_cache()
def get_asset_storage() -> AssetStorage:
    settings = get_settings()
    backend_key = settings.storage_backend.lower()
    if backend_key not in _BACKENDS:
        raise ValueError(f"Unsupported storage backend: {backend_key}")
    return _BACKENDS[backend_key](settings)

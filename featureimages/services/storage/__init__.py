from .base import AssetStorage, AssetStorageError
from .gcs import GCSAssetStorage
from .local import LocalAssetStorage
from .registry import get_asset_storage

__all__ = [
    "AssetStorage",
    "AssetStorageError",
    "GCSAssetStorage",
    "LocalAssetStorage",
    "get_asset_storage",
]

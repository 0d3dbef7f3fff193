from __future__ import annotations

from functools import lru_cache

from featureimages.config import get_settings
from featureimages.services.feature_images import get_feature_images

from .base import PageStore
from .firebase import FirebasePageStore
from .memory import MemoryPageStore

_BACKENDS: dict[str, type[PageStore]] = {
    "firebase": FirebasePageStore,
    "memory": MemoryPageStore,
}


@lru_cache()
def get_page_store() -> PageStore:
    settings = get_settings()
    backend_key = settings.page_store_backend.lower()
    if backend_key not in _BACKENDS:
        raise ValueError(f"Unsupported page store backend: {backend_key}")
    store = _BACKENDS[backend_key](settings)
    store.register_after_write(get_feature_images().on_after_write)
    return store

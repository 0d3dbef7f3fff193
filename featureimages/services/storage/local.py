"""Local filesystem backend, served by the app under ``/assets``."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from featureimages.config import Settings

from .base import AssetStorage, AssetStorageError

logger = logging.getLogger(__name__)

ASSETS_URL_PREFIX = "/assets"


class LocalAssetStorage(AssetStorage):
    name = "local"

    def __init__(self, settings: Settings, *, root: Path | None = None) -> None:
        super().__init__(settings)
        self._root = (root or Path(settings.assets_path)).resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if target != self._root and self._root not in target.parents:
            raise AssetStorageError(f"Path escapes the asset root: {path}")
        return target

    def save_bytes(self, path: str, data: bytes, *, content_type: str) -> None:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise AssetStorageError(f"Write of {path} failed: {exc}") from exc
        logger.debug("Wrote %s (%s, %d bytes)", target, content_type, len(data))

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def delete(self, path: str) -> None:
        try:
            self._resolve(path).unlink(missing_ok=True)
        except OSError as exc:
            raise AssetStorageError(f"Delete of {path} failed: {exc}") from exc

    def public_url(self, path: str) -> str:
        base = self._settings.site_base_url.rstrip("/")
        return f"{base}{ASSETS_URL_PREFIX}/{path.lstrip('/')}"

    def make_folder(self, path: str) -> None:
        try:
            self._resolve(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise AssetStorageError(f"Cannot create folder {path}: {exc}") from exc

    def list_folders(self, prefix: str) -> List[str]:
        base = self._resolve(prefix)
        if not base.is_dir():
            return []
        prefix = prefix if prefix.endswith("/") else prefix + "/"
        return sorted(f"{prefix}{child.name}/" for child in base.iterdir() if child.is_dir())

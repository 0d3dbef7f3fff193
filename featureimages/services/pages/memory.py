from __future__ import annotations

import threading
from typing import Dict, List

from featureimages.config import Settings
from featureimages.models import Page

from .base import PageStore


class MemoryPageStore(PageStore):
    """In-process page store for local development and tests."""

    name = "memory"

    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__()
        self._pages: Dict[int, Page] = {}
        self._lock = threading.Lock()

    def get(self, page_id: int) -> Page | None:
        with self._lock:
            return self._pages.get(page_id)

    def list(self) -> List[Page]:
        with self._lock:
            return [self._pages[k] for k in sorted(self._pages)]

    def _write(self, page: Page) -> None:
        with self._lock:
            self._pages[page.id] = page

    def delete(self, page_id: int) -> None:
        with self._lock:
            self._pages.pop(page_id, None)

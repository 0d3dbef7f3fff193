from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, List

from featureimages.models import Page

logger = logging.getLogger(__name__)

AfterWriteHook = Callable[[Page], None]


class PageNotFoundError(LookupError):
    """Raised when a page ID is not in the store."""

    def __init__(self, page_id: int):
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class PageStore(ABC):
    """Persistence for pages, with hooks that run after every write."""

    name: str = "abstract"

    def __init__(self) -> None:
        self._after_write: List[AfterWriteHook] = []

    def register_after_write(self, hook: AfterWriteHook) -> None:
        if hook not in self._after_write:
            self._after_write.append(hook)

    # -------------------------------------------------------------------
    # Backend primitives
    # -------------------------------------------------------------------

    @abstractmethod
    def get(self, page_id: int) -> Page | None:
        ...

    @abstractmethod
    def list(self) -> List[Page]:
        ...

    @abstractmethod
    def _write(self, page: Page) -> None:
        ...

    @abstractmethod
    def delete(self, page_id: int) -> None:
        ...

    # -------------------------------------------------------------------
    # Public helpers
    # -------------------------------------------------------------------

    def require(self, page_id: int) -> Page:
        page = self.get(page_id)
        if page is None:
            raise PageNotFoundError(page_id)
        return page

    def save(self, page: Page) -> Page:
        """Write *page*, then run the after-write hooks with the saved copy.

        Hook errors propagate; the page itself is already written by then.
        """

        saved = page.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        self._write(saved)
        logger.debug("Saved page id=%s via %s store", saved.id, self.name)
        for hook in self._after_write:
            hook(saved)
        return saved

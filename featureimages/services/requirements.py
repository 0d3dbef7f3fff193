"""CSS includes collected while rendering a page."""
from __future__ import annotations

from typing import List


class Requirements:
    """Ordered, de-duplicated list of stylesheets a rendered page needs."""

    def __init__(self) -> None:
        self._css: List[str] = []

    def css(self, url: str) -> None:
        if url not in self._css:
            self._css.append(url)

    @property
    def css_files(self) -> List[str]:
        return list(self._css)

    def clear(self) -> None:
        self._css.clear()

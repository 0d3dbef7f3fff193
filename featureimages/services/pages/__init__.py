from .base import PageNotFoundError, PageStore
from .firebase import FirebasePageStore
from .memory import MemoryPageStore
from .registry import get_page_store

__all__ = [
    "PageNotFoundError",
    "PageStore",
    "FirebasePageStore",
    "MemoryPageStore",
    "get_page_store",
]

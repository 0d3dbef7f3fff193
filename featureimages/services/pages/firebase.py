"""Firebase Realtime Database page store.

Pages are stored under the following path structure:

/pages/{page_id}

All data is validated with Pydantic models before being written or
returned.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List

import firebase_admin
from firebase_admin import credentials, db

from featureimages.config import Settings
from featureimages.models import Page

from .base import PageStore

logger = logging.getLogger(__name__)


def initialise_firebase(settings: Settings) -> None:
    """Initialise the Firebase Admin SDK exactly once."""

    if firebase_admin._apps:  # type: ignore[attr-defined]
        return
    try:
        if settings.firebase_credentials_json:
            # Accept path or JSON string
            cred_obj: credentials.Base = (
                credentials.Certificate(settings.firebase_credentials_json)
                if settings.firebase_credentials_json.endswith(".json")
                else credentials.Certificate(json.loads(settings.firebase_credentials_json))
            )
        else:
            # Attempt default credentials (useful on Cloud Run with workload identity)
            cred_obj = credentials.ApplicationDefault()

        firebase_admin.initialize_app(
            cred_obj,
            {
                "databaseURL": f"https://{settings.project_id}.firebaseio.com"
                if settings.project_id
                else None,
            },
        )
        logger.info("Firebase Admin SDK initialised.")
    except Exception as exc:  # pragma: no cover
        logger.exception("Failed to initialise Firebase Admin SDK: %s", exc)
        raise


def _validate_page_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Validate and normalise a raw page dict.

    Returns the validated JSON-ready dict.
    """

    page = Page.model_validate(data)
    return page.model_dump(mode="json")


class FirebasePageStore(PageStore):
    """Wrapper around Firebase Realtime Database operations."""

    name = "firebase"

    def __init__(self, settings: Settings, *, root: Any = None) -> None:
        super().__init__()
        if root is None:
            initialise_firebase(settings)
            root = db.reference("/")
        self._root = root

    def _pages_ref(self):
        return self._root.child("pages")

    def get(self, page_id: int) -> Page | None:
        data = self._pages_ref().child(str(page_id)).get()
        if data is None:
            return None
        return Page.model_validate(_validate_page_dict(data))

    def list(self) -> List[Page]:
        raw = self._pages_ref().get() or {}
        # Sequential integer keys come back from the Realtime Database as a list
        items = raw.values() if isinstance(raw, dict) else raw
        pages = [Page.model_validate(_validate_page_dict(item)) for item in items if item]
        pages.sort(key=lambda p: p.id)
        return pages

    def _write(self, page: Page) -> None:
        data = page.model_dump(mode="json")
        self._pages_ref().child(str(page.id)).set(data)

    def delete(self, page_id: int) -> None:
        self._pages_ref().child(str(page_id)).delete()
        logger.debug("Deleted page id=%s", page_id)

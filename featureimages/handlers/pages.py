"""Page and feature image endpoints used by the CMS."""
from __future__ import annotations

import logging
from enum import Enum
from typing import List

from fastapi import APIRouter, Depends, File, Header, HTTPException, Response, UploadFile, status
from pydantic import ValidationError

from featureimages.config import Settings, get_settings
from featureimages.models import FormField, Page, PageUpdate
from featureimages.services.feature_images import FeatureImages, get_feature_images
from featureimages.services.pages import PageNotFoundError, PageStore, get_page_store
from featureimages.services.requirements import Requirements
from featureimages.services.storage import AssetStorageError

router = APIRouter(prefix="/pages", tags=["pages"])
logger = logging.getLogger(__name__)


class Tier(str, Enum):
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"
    MOBILE = "mobile"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def check_admin_token(
    admin_token: str | None = Header(None, alias="Admin-Token"),
    settings: Settings = Depends(get_settings),
) -> None:
    if admin_token != settings.admin_token:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def _require_page(store: PageStore, page_id: int) -> Page:
    try:
        return store.require(page_id)
    except PageNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def _save_images(store: PageStore, feature_images: FeatureImages, previous: Page, updated: Page) -> Page:
    """Save a page whose images changed, deleting replaced files only once it is stored."""

    try:
        saved = store.save(updated)
    except Exception:
        # Drop the fresh upload; the stored page still references the old files
        try:
            feature_images.discard_unreferenced(updated, previous)
        except AssetStorageError as exc:
            logger.error("Could not remove unsaved upload for page id=%s: %s", updated.id, exc)
        raise
    try:
        feature_images.discard_unreferenced(previous, saved)
    except AssetStorageError as exc:
        logger.warning("Replaced feature image left in storage for page id=%s: %s", saved.id, exc)
    return saved


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


@router.get("", response_model=List[Page])
def list_pages(store: PageStore = Depends(get_page_store)):
    return store.list()


@router.get("/{page_id}", response_model=Page)
def get_page(page_id: int, store: PageStore = Depends(get_page_store)):
    return _require_page(store, page_id)


@router.put("/{page_id}", response_model=Page, dependencies=[Depends(check_admin_token)])
def put_page(page_id: int, update: PageUpdate, store: PageStore = Depends(get_page_store)):
    """Create or update a page. Feature image CSS is regenerated after the write."""

    existing = store.get(page_id)
    base = existing.model_dump() if existing is not None else {"id": page_id}
    try:
        page = Page.model_validate({**base, **update.model_dump(exclude_unset=True)})
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc
    return store.save(page)


@router.delete("/{page_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(check_admin_token)])
def delete_page(page_id: int, store: PageStore = Depends(get_page_store)):
    _require_page(store, page_id)
    store.delete(page_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{page_id}/cms-fields", response_model=List[FormField])
def cms_fields(
    page_id: int,
    store: PageStore = Depends(get_page_store),
    feature_images: FeatureImages = Depends(get_feature_images),
):
    return feature_images.cms_fields(_require_page(store, page_id))


# ---------------------------------------------------------------------------
# Feature images
# ---------------------------------------------------------------------------


@router.post("/{page_id}/feature-images/regenerate", dependencies=[Depends(check_admin_token)])
def regenerate_css(
    page_id: int,
    store: PageStore = Depends(get_page_store),
    feature_images: FeatureImages = Depends(get_feature_images),
):
    page = _require_page(store, page_id)
    if not feature_images.has_feature_images(page):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Page has no feature images")
    try:
        path = feature_images.regenerate_css(page)
    except AssetStorageError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Asset storage unavailable") from exc
    return {"status": "regenerated", "path": path}


@router.post("/{page_id}/feature-images/{tier}", response_model=Page, dependencies=[Depends(check_admin_token)])
def upload_feature_image(
    page_id: int,
    tier: Tier,
    file: UploadFile = File(..., description="Image for this breakpoint (PNG, JPG, WEBP or GIF)."),
    store: PageStore = Depends(get_page_store),
    feature_images: FeatureImages = Depends(get_feature_images),
):
    previous = _require_page(store, page_id)
    data = file.file.read()
    try:
        updated = feature_images.attach_image(
            previous,
            tier.value,
            data,
            content_type=file.content_type or "",
            filename=file.filename,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AssetStorageError as exc:
        logger.error("Upload for page id=%s tier=%s failed: %s", page_id, tier.value, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Asset storage unavailable") from exc
    return _save_images(store, feature_images, previous, updated)


@router.delete("/{page_id}/feature-images/{tier}", response_model=Page, dependencies=[Depends(check_admin_token)])
def remove_feature_image(
    page_id: int,
    tier: Tier,
    store: PageStore = Depends(get_page_store),
    feature_images: FeatureImages = Depends(get_feature_images),
):
    previous = _require_page(store, page_id)
    updated = feature_images.detach_image(previous, tier.value)
    return _save_images(store, feature_images, previous, updated)


@router.get("/{page_id}/feature-images.css")
def feature_images_css(
    page_id: int,
    store: PageStore = Depends(get_page_store),
    feature_images: FeatureImages = Depends(get_feature_images),
):
    """Serve the page's CSS inline, without touching the asset store."""

    page = _require_page(store, page_id)
    if not feature_images.has_feature_images(page):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page has no feature images")
    return Response(content=feature_images.get_css(page), media_type="text/css")


@router.get("/{page_id}/requirements")
def page_requirements(
    page_id: int,
    store: PageStore = Depends(get_page_store),
    feature_images: FeatureImages = Depends(get_feature_images),
):
    """Stylesheets to include when rendering the page."""

    page = _require_page(store, page_id)
    requirements = Requirements()
    feature_images.require_css(page, requirements)
    return {"css": requirements.css_files}

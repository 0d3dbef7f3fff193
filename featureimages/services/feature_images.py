"""Feature image behaviours for content pages.

A page carrying feature images gets:

* a "Feature Images" tab in the CMS with upload fields for the responsive
  variations of the image (mobile optional, then small, medium and large);
* a folder of its own in the asset store, ``{root}{id}_{segment}/``, holding
  the uploaded images and a generated CSS include;
* CSS regeneration after every write, and a CSS requirement whenever the
  page is rendered.
"""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Dict, List
from uuid import uuid4

from featureimages.config import Settings, get_settings
from featureimages.models import (
    BREAKPOINTS,
    MOBILE_BREAKPOINT,
    BreakpointImage,
    FormField,
    Page,
    get_breakpoint,
)
from featureimages.services.css_generator import (
    GeneratedCSS,
    ResponsiveBackgroundCSSGenerator,
    host_relative_url,
    make_url_resolver,
)
from featureimages.services.requirements import Requirements
from featureimages.services.storage import AssetStorage, AssetStorageError, get_asset_storage

logger = logging.getLogger(__name__)

_SEGMENT_STRIP_RE = re.compile(r"[^A-Za-z0-9-]+")

# Upload fields in the order they appear on the tab
_UPLOAD_ORDER = ("mobile", "small", "medium", "large")


class FeatureImages:
    """Feature image extension for pages, bound to one asset store."""

    def __init__(
        self,
        settings: Settings,
        storage: AssetStorage,
        *,
        generator: ResponsiveBackgroundCSSGenerator | None = None,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._generator = generator or ResponsiveBackgroundCSSGenerator()
        self._images_enabled = True
        self._folder_cache: Dict[int, str] = {}

    @property
    def root(self) -> str:
        root = self._settings.feature_images_root
        return root if root.endswith("/") else root + "/"

    def set_feature_images_enabled(self, value: bool) -> "FeatureImages":
        self._images_enabled = value
        return self

    # ------------------------------------------------------------------
    # CMS fields
    # ------------------------------------------------------------------

    def cms_fields(self, page: Page) -> List[FormField]:
        """Fields for the feature images tab of *page*, in display order."""

        if not self._settings.enable_cms_fields or not self._images_enabled:
            return []
        options = page.options
        if not options.enabled:
            return []

        fields: List[FormField] = []
        if options.show_accessible_description:
            fields.append(
                FormField(
                    name="featured_image_text",
                    title="Describe the text on the featured image (if present)",
                    kind="text",
                )
            )

        folder = self.folder_path(page)
        for tier in _UPLOAD_ORDER:
            bp = get_breakpoint(tier)
            if bp is MOBILE_BREAKPOINT and not options.show_mobile:
                continue
            fields.append(
                FormField(
                    name=bp.field,
                    title=bp.label,
                    kind="upload",
                    description=bp.size_hint,
                    folder_name=folder,
                )
            )

        if options.show_text:
            fields.append(FormField(name="feature_text", title="Feature text", kind="textarea"))
        return fields

    # ------------------------------------------------------------------
    # Folders and paths
    # ------------------------------------------------------------------

    def folder_name(self, page: Page) -> str:
        """Folder for *page* derived from its ID and URL segment."""

        segment = _SEGMENT_STRIP_RE.sub("", page.url_segment)
        return f"{self.root}{page.id}_{segment}/"

    def folder_path(self, page: Page) -> str:
        """Folder holding the images and CSS of *page*.

        An existing folder whose name starts with the page ID is reused, so a
        renamed page keeps its folder. Otherwise the folder is created.
        """

        cached = self._folder_cache.get(page.id)
        if cached:
            return cached

        path = self._find_existing(page)
        if path is None:
            path = self.folder_name(page)
            self._storage.make_folder(path)
            logger.info("Created feature image folder %s", path)

        self._folder_cache[page.id] = path
        return path

    def _find_existing(self, page: Page) -> str | None:
        prefix = f"{page.id}_"
        for folder in self._storage.list_folders(self.root):
            name = folder.rstrip("/").rsplit("/", 1)[-1]
            if name.startswith(prefix):
                return folder
        return None

    def css_path(self, page: Page) -> str:
        return self.folder_path(page) + self._settings.css_include_name

    def css_url(self, page: Page) -> str:
        return host_relative_url(self._storage.public_url(self.css_path(page)), self._settings.site_base_url)

    # ------------------------------------------------------------------
    # CSS
    # ------------------------------------------------------------------

    def breakpoint_images(self, page: Page) -> List[BreakpointImage]:
        return [BreakpointImage(breakpoint=bp, image=getattr(page, bp.field)) for bp in BREAKPOINTS]

    def has_feature_images(self, page: Page) -> bool:
        """True if any tier has an image; one image is enough as the others fall back to it."""

        return any(item.present for item in self.breakpoint_images(page))

    def build_css(self, page: Page) -> GeneratedCSS:
        mobile = page.feature_image_mobile
        return self._generator.build(
            self.breakpoint_images(page),
            mobile_provided=mobile is not None and mobile.present,
            url_resolver=make_url_resolver(self._settings.site_base_url),
        )

    def get_css(self, page: Page) -> str:
        return self.build_css(page).css

    def regenerate_css(self, page: Page) -> str:
        """Write the CSS include for *page* into its folder and return its path."""

        css = self.get_css(page)
        path = self.css_path(page)
        self._storage.save_text(path, css)
        logger.info("Regenerated feature image CSS for page id=%s at %s", page.id, path)
        return path

    def css_exists(self, page: Page) -> bool:
        return self._storage.exists(self.css_path(page))

    def on_after_write(self, page: Page) -> None:
        """Regenerate the CSS of a written page.

        The page is already stored, so a storage failure is logged rather than
        raised. The stale include is dropped where possible so the next render
        regenerates it through :meth:`require_css`.
        """

        if not self.has_feature_images(page):
            return
        try:
            self.regenerate_css(page)
        except AssetStorageError as exc:
            logger.warning("Could not regenerate feature image CSS for page id=%s: %s", page.id, exc)
            try:
                self._storage.delete(self.css_path(page))
            except AssetStorageError as cleanup_exc:
                logger.error("Stale feature image CSS left for page id=%s: %s", page.id, cleanup_exc)

    def require_css(self, page: Page, requirements: Requirements) -> str | None:
        """Add the CSS include of *page* to *requirements*.

        Call whenever a page with feature images is rendered. A missing CSS
        file is regenerated first; a storage failure is logged and the page
        renders without the include.
        """

        if not self.has_feature_images(page):
            return None

        if not self.css_exists(page):
            try:
                self.regenerate_css(page)
            except AssetStorageError as exc:
                logger.warning("Could not regenerate feature image CSS for page id=%s: %s", page.id, exc)

        if not self.css_exists(page):
            return None
        url = self.css_url(page)
        requirements.css(url)
        return url

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def attach_image(
        self,
        page: Page,
        tier: str,
        file_bytes: bytes,
        *,
        content_type: str,
        filename: str | None = None,
    ) -> Page:
        """Store an image for *tier* in the page folder; returns the updated, unsaved page.

        The previous image stays in the store until :meth:`discard_unreferenced`
        is called with the saved page.
        """

        bp = get_breakpoint(tier)
        image = self._storage.upload_image(
            file_bytes,
            self.folder_path(page),
            f"{bp.tier}-{uuid4().hex[:8]}",
            content_type=content_type,
            filename=filename,
        )
        return page.model_copy(update={bp.field: image})

    def detach_image(self, page: Page, tier: str) -> Page:
        bp = get_breakpoint(tier)
        return page.model_copy(update={bp.field: None})

    def discard_unreferenced(self, old: Page, new: Page) -> List[str]:
        """Delete the images of *old* that *new* no longer references.

        Call with (previous, saved) after a successful save, or with
        (unsaved, previous) to drop a fresh upload when the save failed.
        """

        keep = {img.path for img in (getattr(new, bp.field) for bp in BREAKPOINTS) if img is not None}
        removed = []
        for bp in BREAKPOINTS:
            image = getattr(old, bp.field)
            if image is not None and image.path and image.path not in keep:
                self._storage.delete(image.path)
                removed.append(image.path)
        return removed


@lru_cache()
def get_feature_images() -> FeatureImages:
    return FeatureImages(get_settings(), get_asset_storage())

from __future__ import annotations

import copy
import io
import os

import pytest
from PIL import Image

os.environ.setdefault("ADMIN_TOKEN", "test-token")
os.environ.setdefault("PAGE_STORE_BACKEND", "memory")

from featureimages.config import Settings  # noqa: E402
from featureimages.models import ImageReference, Page  # noqa: E402
from featureimages.services.feature_images import FeatureImages  # noqa: E402
from featureimages.services.pages import MemoryPageStore  # noqa: E402
from featureimages.services.storage import LocalAssetStorage  # noqa: E402

ADMIN_TOKEN = "test-token"
SITE = "http://cms.test"


def make_png(width: int = 40, height: int = 10, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buffer, format=fmt)
    return buffer.getvalue()


def image_ref(name: str, host: str = SITE) -> ImageReference:
    return ImageReference(id=name, url=f"{host}/assets/{name}.jpg", path=f"{name}.jpg")


# ---------------------------------------------------------------------------
# Fakes for the production backends
# ---------------------------------------------------------------------------


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str):
        self._bucket = bucket
        self.name = name

    @property
    def public_url(self) -> str:
        return f"https://storage.googleapis.com/{self._bucket.name}/{self.name}"

    def upload_from_string(self, data, content_type=None):
        self._bucket.objects[self.name] = (data, content_type)

    def exists(self) -> bool:
        return self.name in self._bucket.objects

    def delete(self) -> None:
        del self._bucket.objects[self.name]

    def make_public(self) -> None:
        self._bucket.public.add(self.name)


class FakeBlobIterator:
    def __init__(self, blobs, prefixes):
        self._blobs = blobs
        self.prefixes = set()
        self._pending = prefixes

    def __iter__(self):
        yield from self._blobs
        self.prefixes = set(self._pending)


class FakeBucket:
    def __init__(self, name: str = "test-bucket"):
        self.name = name
        self.objects: dict[str, tuple] = {}
        self.public: set[str] = set()

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)

    def list_blobs(self, prefix: str = "", delimiter: str | None = None):
        blobs, prefixes = [], set()
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                prefixes.add(prefix + rest.split(delimiter, 1)[0] + delimiter)
            else:
                blobs.append(FakeBlob(self, key))
        return FakeBlobIterator(blobs, prefixes)


class FakeReference:
    """Minimal stand-in for a firebase_admin.db.Reference over a nested dict."""

    def __init__(self, tree: dict | None = None, path: tuple = ()):
        self._tree = tree if tree is not None else {}
        self._path = path

    def child(self, key: str) -> "FakeReference":
        return FakeReference(self._tree, self._path + (key,))

    def get(self):
        node = self._tree
        for key in self._path:
            if not isinstance(node, dict) or key not in node:
                return None
            node = node[key]
        return copy.deepcopy(node)

    def set(self, data) -> None:
        node = self._tree
        for key in self._path[:-1]:
            node = node.setdefault(key, {})
        node[self._path[-1]] = copy.deepcopy(data)

    def delete(self) -> None:
        node = self._tree
        for key in self._path[:-1]:
            node = node.get(key, {})
        node.pop(self._path[-1], None)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        admin_token=ADMIN_TOKEN,
        site_base_url=SITE,
        storage_backend="local",
        page_store_backend="memory",
        assets_path=str(tmp_path / "assets"),
    )


@pytest.fixture
def storage(settings) -> LocalAssetStorage:
    return LocalAssetStorage(settings)


@pytest.fixture
def feature_images(settings, storage) -> FeatureImages:
    return FeatureImages(settings, storage)


@pytest.fixture
def page_store(feature_images) -> MemoryPageStore:
    store = MemoryPageStore()
    store.register_after_write(feature_images.on_after_write)
    return store


@pytest.fixture
def page() -> Page:
    return Page(id=7, title="About us", url_segment="about-us")

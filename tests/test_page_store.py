from __future__ import annotations

import pytest

from featureimages.models import Page
from featureimages.services.pages import FirebasePageStore, MemoryPageStore, PageNotFoundError

from .conftest import FakeReference, image_ref


@pytest.fixture(params=["memory", "firebase"])
def store(request, settings):
    if request.param == "memory":
        return MemoryPageStore(settings)
    return FirebasePageStore(settings, root=FakeReference())


def test_save_and_get(store, page):
    saved = store.save(page)

    assert saved.updated_at is not None
    assert page.updated_at is None
    assert store.get(7) == saved
    assert store.get(8) is None


def test_list_is_sorted_by_id(store):
    store.save(Page(id=3, url_segment="c"))
    store.save(Page(id=1, url_segment="a"))

    assert [p.id for p in store.list()] == [1, 3]


def test_delete(store, page):
    store.save(page)
    store.delete(page.id)
    store.delete(page.id)

    with pytest.raises(PageNotFoundError) as excinfo:
        store.require(page.id)
    assert excinfo.value.page_id == 7


def test_after_write_hooks_run_in_order(store, page):
    calls = []
    first = lambda p: calls.append(("first", p.id))  # noqa: E731
    store.register_after_write(first)
    store.register_after_write(first)
    store.register_after_write(lambda p: calls.append(("second", p.updated_at is not None)))

    store.save(page)

    assert calls == [("first", 7), ("second", True)]


def test_hook_errors_propagate_after_write(store, page):
    def failing(_page):
        raise RuntimeError("boom")

    store.register_after_write(failing)
    with pytest.raises(RuntimeError):
        store.save(page)
    assert store.get(page.id) is not None


def test_images_survive_round_trip(store, page):
    page.feature_image_medium = image_ref("m")
    store.save(page)

    assert store.require(7).feature_image_medium == image_ref("m")


def test_firebase_list_accepts_array_form(settings):
    # The Realtime Database returns sequential integer keys as an array
    pages = [None, Page(id=1, url_segment="a").model_dump(mode="json")]
    store = FirebasePageStore(settings, root=FakeReference({"pages": pages}))

    assert [p.id for p in store.list()] == [1]


def test_page_store_hook_regenerates_css(page_store, feature_images, page):
    page.feature_image_large = image_ref("l")
    page_store.save(page)

    assert feature_images.css_exists(page)

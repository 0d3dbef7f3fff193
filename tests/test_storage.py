from __future__ import annotations

import pytest
from PIL import Image

from featureimages.services.storage import AssetStorageError, GCSAssetStorage, LocalAssetStorage

from .conftest import FakeBucket, make_png


@pytest.fixture
def bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def gcs(settings, bucket) -> GCSAssetStorage:
    return GCSAssetStorage(settings, bucket=bucket)


# ---------------------------------------------------------------------------
# Upload validation (shared by every backend)
# ---------------------------------------------------------------------------


def test_upload_rejects_non_image(storage):
    with pytest.raises(ValueError, match="image/"):
        storage.upload_image(b"body {}", "f/", "x", content_type="text/css")


def test_upload_rejects_oversized_file(storage):
    with pytest.raises(ValueError, match="10 MB"):
        storage.upload_image(b"0" * (10 * 1024 * 1024 + 1), "f/", "x", content_type="image/png")


def test_upload_rejects_unreadable_image(storage):
    with pytest.raises(ValueError, match="readable"):
        storage.upload_image(b"not an image", "f/", "x", content_type="image/png")


def test_upload_compresses_to_max_dim(settings, tmp_path):
    settings.image_max_dim = 100
    storage = LocalAssetStorage(settings, root=tmp_path / "compressed")

    image = storage.upload_image(make_png(400, 100), "f/", "large", content_type="image/png", compress=True)

    assert image.mime_type == "image/jpeg"
    assert image.path == "f/large.jpg"
    assert (image.width, image.height) == (100, 25)


# ---------------------------------------------------------------------------
# Local backend
# ---------------------------------------------------------------------------


def test_local_save_exists_delete(storage):
    storage.save_text("feature-images/1_a/include.css", "body {}")

    assert storage.exists("feature-images/1_a/include.css")
    assert (storage.root / "feature-images" / "1_a" / "include.css").read_text() == "body {}"

    storage.delete("feature-images/1_a/include.css")
    storage.delete("feature-images/1_a/include.css")
    assert not storage.exists("feature-images/1_a/include.css")


def test_local_list_folders(storage):
    assert storage.list_folders("feature-images/") == []
    storage.make_folder("feature-images/2_b/")
    storage.make_folder("feature-images/1_a/")
    storage.save_text("feature-images/readme.txt", "x", content_type="text/plain")

    assert storage.list_folders("feature-images/") == ["feature-images/1_a/", "feature-images/2_b/"]


def test_local_rejects_paths_outside_root(storage):
    with pytest.raises(AssetStorageError):
        storage.save_text("../escape.css", "x")


def test_local_public_url(storage):
    assert storage.public_url("feature-images/1_a/l.jpg") == "http://cms.test/assets/feature-images/1_a/l.jpg"


# ---------------------------------------------------------------------------
# GCS backend
# ---------------------------------------------------------------------------


def test_gcs_save_makes_blob_public(gcs, bucket):
    gcs.save_text("feature-images/1_a/include.css", "body {}")

    data, content_type = bucket.objects["feature-images/1_a/include.css"]
    assert data == b"body {}"
    assert content_type == "text/css"
    assert "feature-images/1_a/include.css" in bucket.public


def test_gcs_private_assets(settings, bucket):
    settings.public_assets = False
    GCSAssetStorage(settings, bucket=bucket).save_text("a.css", "x")
    assert bucket.public == set()


def test_gcs_folders(gcs, bucket):
    gcs.make_folder("feature-images/3_c")
    gcs.make_folder("feature-images/3_c/")
    gcs.save_text("feature-images/4_d/include.css", "x")

    assert "feature-images/3_c/" in bucket.objects
    assert gcs.list_folders("feature-images/") == ["feature-images/3_c/", "feature-images/4_d/"]


def test_gcs_upload_and_delete(gcs, bucket):
    image = gcs.upload_image(make_png(), "feature-images/1_a/", "small", content_type="image/png")

    assert image.url == "https://storage.googleapis.com/test-bucket/feature-images/1_a/small.png"
    assert gcs.exists(image.path)

    gcs.delete(image.path)
    gcs.delete(image.path)
    assert not gcs.exists(image.path)


def test_upload_rejects_decompression_bomb(storage, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(ValueError, match="readable"):
        storage.upload_image(make_png(40, 10), "f/", "x", content_type="image/png")

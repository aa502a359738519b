"""Tests for photo validation and the concurrent upload step."""

import asyncio

import pytest

from app.core.exceptions import InvalidPhoto, MissingPhotos, PhotoUploadFailed
from app.services.photos import (LocalBlobStore, decode_data_url,
                                 require_photos, upload_photos)
from helpers import PHOTOS, FakeBlobStore, local


def test_require_photos_lists_every_missing_field():
    with pytest.raises(MissingPhotos) as exc:
        require_photos({"selfie_photo": PHOTOS["selfie_photo"], "shoes_photo": "   "})
    assert "shoes_photo" in exc.value.detail
    assert "uniform_photo" in exc.value.detail
    assert "workstation_photo" in exc.value.detail
    assert "selfie_photo" not in exc.value.detail


def test_decode_data_url():
    data, mime = decode_data_url(PHOTOS["selfie_photo"])
    assert data == b"\xff\xd8selfie"
    assert mime == "image/jpeg"


@pytest.mark.parametrize(
    "value",
    ["not a url", "data:text/plain;base64,aGVsbG8=", "data:image/png;base64,%%%", "ftp://host/x.jpg"],
)
def test_decode_rejects_non_images(value):
    with pytest.raises(InvalidPhoto):
        decode_data_url(value)


@pytest.mark.asyncio
async def test_local_store_writes_files(tmp_path):
    store = LocalBlobStore(tmp_path, "http://cdn.test/media/")
    urls = await upload_photos(store, dict(PHOTOS), staff_id="stf-001", now=local(9, 0))

    assert set(urls) == set(PHOTOS)
    for name, url in urls.items():
        assert url.startswith("http://cdn.test/media/attendance/stf-001/20240610T033000-")
        assert url.endswith(".jpg")
        path = tmp_path / url.removeprefix("http://cdn.test/media/")
        assert path.read_bytes().startswith(b"\xff\xd8")
    assert "-selfie-" in urls["selfie_photo"]


@pytest.mark.asyncio
async def test_bad_photo_stops_before_any_upload():
    store = FakeBlobStore()
    photos = {**PHOTOS, "workstation_photo": "data:image/jpeg;base64,!!"}
    with pytest.raises(InvalidPhoto):
        await upload_photos(store, photos, staff_id="stf-001", now=local(9, 0))
    assert store.uploads == []


@pytest.mark.asyncio
async def test_slow_upload_times_out_and_cancels_the_rest():
    started, cancelled = [], []

    class SlowStore:
        async def upload(self, data, metadata):
            started.append(metadata["photo_type"])
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append(metadata["photo_type"])
                raise
            return "https://never"

    with pytest.raises(PhotoUploadFailed):
        await upload_photos(SlowStore(), dict(PHOTOS), staff_id="stf-001", now=local(9, 0), timeout=0.05)
    await asyncio.sleep(0)
    assert sorted(cancelled) == sorted(started)
    assert len(started) == 4

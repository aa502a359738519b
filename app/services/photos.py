"""
Check-in photo handling.

Photos arrive as base64 data URLs (camera captures) or as URLs that were
already uploaded. All four are pushed to the blob store concurrently; the
first failure cancels the rest and aborts the check-in.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
import secrets
from datetime import datetime
from pathlib import Path
from typing import Protocol

from app.core.config import settings
from app.core.exceptions import InvalidPhoto, MissingPhotos, PhotoUploadFailed

logger = logging.getLogger(__name__)

PHOTO_FIELDS = ("selfie_photo", "shoes_photo", "uniform_photo", "workstation_photo")

_DATA_URL_RE = re.compile(r"^data:(?P<mime>image/[a-z0-9.+-]+);base64,(?P<data>.+)$", re.S)
_EXTENSIONS = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/png": "png", "image/webp": "webp"}


class BlobStore(Protocol):
    async def upload(self, data: bytes, metadata: dict[str, str]) -> str:
        """Store *data* and return its public URL. Raises on failure."""
        ...


class LocalBlobStore:
    """Writes photos below a directory served at ``base_url``."""

    def __init__(self, root: str | Path, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    async def upload(self, data: bytes, metadata: dict[str, str]) -> str:
        ext = _EXTENSIONS.get(metadata.get("content_type", ""), "jpg")
        key = (
            f"attendance/{metadata['staff_id']}/"
            f"{metadata['timestamp']}-{metadata['photo_type']}-{secrets.token_hex(4)}.{ext}"
        )
        await asyncio.to_thread(self._write, self.root / key, data)
        return f"{self.base_url}/{key}"

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


def require_photos(photos: dict[str, str | None]) -> dict[str, str]:
    missing = [name for name in PHOTO_FIELDS if not (photos.get(name) or "").strip()]
    if missing:
        raise MissingPhotos(f"All four photos are required to check in (missing: {', '.join(missing)})")
    return {name: photos[name].strip() for name in PHOTO_FIELDS}  # type: ignore[union-attr]


def is_remote_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def decode_data_url(value: str) -> tuple[bytes, str]:
    """Return ``(bytes, mime)`` for a base64 image data URL."""
    match = _DATA_URL_RE.match(value)
    if not match:
        raise InvalidPhoto()
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidPhoto("Photo is not valid base64") from None
    if not data:
        raise InvalidPhoto("Photo is empty")
    return data, match.group("mime")


async def upload_photos(
    store: BlobStore,
    photos: dict[str, str],
    *,
    staff_id: str,
    now: datetime,
    timeout: float | None = None,
) -> dict[str, str]:
    """Upload every photo concurrently and return ``{field: url}``.

    Everything is decoded up front so a malformed photo is rejected before
    any upload starts.
    """
    timeout = settings.PHOTO_UPLOAD_TIMEOUT_SECONDS if timeout is None else timeout
    stamp = now.strftime("%Y%m%dT%H%M%S")

    urls: dict[str, str] = {}
    pending: dict[str, tuple[bytes, dict[str, str]]] = {}
    for name, value in photos.items():
        if is_remote_url(value):
            urls[name] = value
            continue
        data, mime = decode_data_url(value)
        pending[name] = (
            data,
            {
                "staff_id": staff_id,
                "photo_type": name.removesuffix("_photo"),
                "timestamp": stamp,
                "content_type": mime,
            },
        )

    if not pending:
        return urls

    names = list(pending)
    tasks = [asyncio.ensure_future(store.upload(*pending[n])) for n in names]
    try:
        results = await asyncio.wait_for(asyncio.gather(*tasks), timeout=timeout)
    except Exception as e:
        for task in tasks:
            task.cancel()
        logger.error("Photo upload failed for staff %s: %r", staff_id, e)
        raise PhotoUploadFailed() from e

    urls.update(zip(names, results))
    return urls

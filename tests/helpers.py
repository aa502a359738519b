"""Helpers shared by the test modules (imported after conftest set the env)."""

import base64
from datetime import datetime, timedelta, timezone

from app.core.security import create_access_token
from app.services.clock import LOCAL_TZ

STAFF_ID = "stf-001"
FRANCHISE_ID = "fr-001"


def local(hour: int, minute: int = 0, day: int = 10, month: int = 6, year: int = 2024) -> datetime:
    """UTC instant for a wall-clock time in the service's local zone.

    The default day, 2024-06-10, is a Monday.
    """
    return datetime(year, month, day, hour, minute, tzinfo=LOCAL_TZ).astimezone(timezone.utc)


def _data_url(payload: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(payload).decode()


PHOTOS = {
    "selfie_photo": _data_url(b"\xff\xd8selfie"),
    "shoes_photo": _data_url(b"\xff\xd8shoes"),
    "uniform_photo": _data_url(b"\xff\xd8uniform"),
    "workstation_photo": _data_url(b"\xff\xd8workstation"),
}


def auth_headers(
    staff_id: str = STAFF_ID,
    role: str = "FRANCHISE_STAFF",
    franchise_id: str | None = FRANCHISE_ID,
    **claims,
) -> dict[str, str]:
    token = create_access_token(
        staff_id,
        {
            "role": role,
            "franchise_id": franchise_id,
            "franchise_name": "Central Kitchen",
            **claims,
        },
    )
    return {"Authorization": f"Bearer {token}"}


class FrozenClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeBlobStore:
    """Collects uploads in memory; ``fail_on`` makes one photo type fail."""

    def __init__(self) -> None:
        self.uploads: list[tuple[bytes, dict[str, str]]] = []
        self.fail_on: str | None = None

    async def upload(self, data: bytes, metadata: dict[str, str]) -> str:
        if metadata["photo_type"] == self.fail_on:
            raise RuntimeError("blob store unavailable")
        self.uploads.append((data, metadata))
        return f"https://blobs.test/{metadata['staff_id']}/{metadata['photo_type']}.jpg"

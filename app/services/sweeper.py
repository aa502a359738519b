"""
Read-time repair of attendance records that were never checked out.

There is no background job. Every record fetched for a caller passes through
:func:`sweep_records`; an open record older than ``AUTO_CHECKOUT_HOURS`` is
closed at ``checkin_time + AUTO_CHECKOUT_HOURS`` (not at "now") and the staff
member loses ``NO_CHECKOUT`` points. A record nobody ever reads again stays
open.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.attendance import AttendanceRecord, AttendanceStatus
from app.repositories.attendance import close_if_open
from app.services import scoring
from app.services.clock import ensure_utc, utcnow

logger = logging.getLogger(__name__)

AUTO_CHECKOUT_REASON = "Auto-checkout after {hours} hours"


def auto_checkout_window() -> timedelta:
    return timedelta(hours=settings.AUTO_CHECKOUT_HOURS)


def append_reason(existing: str | None, reason: str) -> str:
    return f"{existing}; {reason}" if existing else reason


def is_stale(record: AttendanceRecord, now: datetime) -> bool:
    if not record.is_open:
        return False
    return ensure_utc(now) - ensure_utc(record.checkin_time) >= auto_checkout_window()


async def sweep_record(db: AsyncSession, record: AttendanceRecord, now: datetime) -> bool:
    """Force-close *record* if stale. Returns ``True`` if this call closed it.

    The close is conditional on ``checkout_time IS NULL`` so two readers
    racing on the same record deduct only once.
    """
    if not is_stale(record, now):
        return False

    reason = AUTO_CHECKOUT_REASON.format(hours=settings.AUTO_CHECKOUT_HOURS)
    closed = await close_if_open(
        db,
        record.id,
        checkout_time=ensure_utc(record.checkin_time) + auto_checkout_window(),
        shift_duration=settings.AUTO_CHECKOUT_HOURS * 60,
        status=AttendanceStatus.AUTO_CHECKOUT,
        score_deduction=(record.score_deduction or 0) + scoring.NO_CHECKOUT,
        deduction_reason=append_reason(record.deduction_reason, reason),
        updated_at=now,
    )
    if closed:
        await scoring.apply_deduction(db, record.staff_id, scoring.NO_CHECKOUT, reason, now=now)
        logger.info("Auto-checked out record %s for staff %s", record.id, record.staff_id)
    await db.refresh(record)
    return closed


async def sweep_records(
    db: AsyncSession,
    records: Iterable[AttendanceRecord | None],
    now: datetime | None = None,
) -> list[AttendanceRecord]:
    """Sweep every record and persist corrections before handing them back."""
    now = now or utcnow()
    swept: list[AttendanceRecord] = []
    changed = False
    for record in records:
        if record is None:
            continue
        if await sweep_record(db, record, now):
            changed = True
        swept.append(record)
    if changed:
        await db.commit()
    return swept

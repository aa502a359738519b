"""
Attendance record lifecycle.

    NONE --check_in--> OPEN --check_out--> CHECKED_OUT | EARLY_CHECKOUT
                         \\--sweep-------> AUTO_CHECKOUT

One record per staff member per local civil day. Each transition runs in a
single transaction: the record write and its score deduction commit together
or not at all.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AlreadyCheckedOut, DuplicateCheckin, NoCheckinFound
from app.models.attendance import AttendanceRecord, AttendanceStatus
from app.models.staff import Staff
from app.repositories.attendance import close_if_open, get_for_staff_and_date, query_records
from app.repositories.staff import get_staff
from app.schemas.identity import Identity
from app.services import scoring
from app.services.clock import ensure_utc, local_date, to_local_minutes, utcnow
from app.services.photos import BlobStore, require_photos, upload_photos
from app.services.sweeper import append_reason, sweep_records
from app.services.tolerance import (CheckinVerdict, CheckoutVerdict,
                                    evaluate_checkin, evaluate_checkout,
                                    shift_window)

logger = logging.getLogger(__name__)

LATE_CHECKIN_REASON = "Late check-in"
EARLY_CHECKOUT_REASON = "Early checkout"


@dataclass
class CheckinResult:
    record: AttendanceRecord
    verdict: CheckinVerdict
    score_update: scoring.Deducted | None = None


@dataclass
class CheckoutResult:
    record: AttendanceRecord
    verdict: CheckoutVerdict
    score_update: scoring.Deducted | None = None


def new_record_id() -> str:
    return f"att-{uuid.uuid4().hex}"


def configured_shift(staff: Staff | None) -> tuple[str, str]:
    """The staff member's shift as ``HH:MM`` strings, falling back to defaults."""
    start = (staff.shift_start_time if staff else None) or settings.DEFAULT_SHIFT_START
    end = (staff.shift_end_time if staff else None) or settings.DEFAULT_SHIFT_END
    return start, end


def _checkin_status(verdict: CheckinVerdict) -> str:
    if verdict.is_late:
        return AttendanceStatus.LATE
    if verdict.is_early:
        return AttendanceStatus.EARLY
    return AttendanceStatus.ON_TIME


async def check_in(
    db: AsyncSession,
    identity: Identity,
    photos: dict[str, str | None],
    blob_store: BlobStore,
    *,
    now: datetime | None = None,
) -> CheckinResult:
    now = now or utcnow()
    today = local_date(now)
    photos_in = require_photos(photos)

    existing = await get_for_staff_and_date(db, identity.staff_id, today)
    if existing is not None:
        raise DuplicateCheckin()

    staff = await get_staff(db, identity.staff_id)
    start_text, end_text = configured_shift(staff)
    start, end = shift_window(start_text, end_text)
    verdict = evaluate_checkin(to_local_minutes(now), start, end)

    # Uploads finish before anything is written, so a failure leaves no record.
    urls = await upload_photos(blob_store, photos_in, staff_id=identity.staff_id, now=now)

    record = AttendanceRecord(
        id=new_record_id(),
        staff_id=identity.staff_id,
        staff_name=identity.name or (staff.name if staff else None),
        employee_id=identity.employee_id or (staff.employee_id if staff else None),
        franchise_id=identity.franchise_id,
        franchise_name=identity.franchise_name,
        date=today,
        checkin_time=now,
        checkout_time=None,
        scheduled_start_time=start_text,
        scheduled_end_time=end_text,
        is_late=verdict.is_late,
        is_early_checkin=verdict.is_early,
        is_early_checkout=False,
        status=_checkin_status(verdict),
        shift_duration=None,
        score_deduction=scoring.LATE_CHECKIN if verdict.is_late else 0,
        deduction_reason=LATE_CHECKIN_REASON if verdict.is_late else None,
        created_at=now,
        **urls,
    )
    db.add(record)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        # Only the (staff_id, date) constraint means a concurrent check-in won.
        if await get_for_staff_and_date(db, identity.staff_id, today) is not None:
            raise DuplicateCheckin() from None
        raise

    score_update = None
    if verdict.is_late:
        outcome = await scoring.apply_deduction(
            db, identity.staff_id, scoring.LATE_CHECKIN, LATE_CHECKIN_REASON, now=now
        )
        if outcome.applied:
            score_update = outcome

    await db.commit()

    logger.info(
        "Check-in %s for staff %s on %s (%s, tolerance %d min)",
        record.id, identity.staff_id, today, record.status, verdict.tolerance,
    )
    return CheckinResult(record=record, verdict=verdict, score_update=score_update)


async def check_out(
    db: AsyncSession,
    identity: Identity,
    *,
    now: datetime | None = None,
) -> CheckoutResult:
    now = now or utcnow()
    today = local_date(now)

    record = await get_for_staff_and_date(db, identity.staff_id, today)
    if record is None:
        raise NoCheckinFound()

    await sweep_records(db, [record], now)
    if record.checkout_time is not None:
        raise AlreadyCheckedOut()

    # Judge against the shift captured at check-in, not the live configuration.
    start, end = shift_window(record.scheduled_start_time, record.scheduled_end_time)
    verdict = evaluate_checkout(to_local_minutes(now), start, end)

    checkin_time = ensure_utc(record.checkin_time)
    checkout_time = max(ensure_utc(now), checkin_time)
    duration = round((checkout_time - checkin_time).total_seconds() / 60)

    deduction = record.score_deduction or 0
    reason = record.deduction_reason
    if verdict.is_early:
        deduction += scoring.EARLY_CHECKOUT
        reason = append_reason(reason, EARLY_CHECKOUT_REASON)

    closed = await close_if_open(
        db,
        record.id,
        checkout_time=checkout_time,
        shift_duration=duration,
        is_early_checkout=verdict.is_early,
        status=AttendanceStatus.EARLY_CHECKOUT if verdict.is_early else AttendanceStatus.CHECKED_OUT,
        score_deduction=deduction,
        deduction_reason=reason,
        updated_at=now,
    )
    if not closed:
        await db.rollback()
        raise AlreadyCheckedOut()

    score_update = None
    if verdict.is_early:
        outcome = await scoring.apply_deduction(
            db, identity.staff_id, scoring.EARLY_CHECKOUT, EARLY_CHECKOUT_REASON, now=now
        )
        if outcome.applied:
            score_update = outcome

    await db.commit()
    await db.refresh(record)
    logger.info(
        "Check-out %s for staff %s after %d min (%s)",
        record.id, identity.staff_id, duration, record.status,
    )
    return CheckoutResult(record=record, verdict=verdict, score_update=score_update)


# ── Read paths (always swept) ───────────────────────────────────────
async def get_today_record(
    db: AsyncSession, staff_id: str, *, now: datetime | None = None
) -> AttendanceRecord | None:
    now = now or utcnow()
    record = await get_for_staff_and_date(db, staff_id, local_date(now))
    swept = await sweep_records(db, [record], now)
    return swept[0] if swept else None


async def list_records(
    db: AsyncSession,
    *,
    now: datetime | None = None,
    **filters,
) -> list[AttendanceRecord]:
    records = await query_records(db, **filters)
    return await sweep_records(db, records, now)


async def current_score(db: AsyncSession, staff_id: str, *, now: datetime | None = None) -> int:
    """Live, reset-aware score; 100 for unknown staff."""
    staff = await get_staff(db, staff_id)
    if staff is None:
        return scoring.MAX_SCORE
    return scoring.effective_score(staff, now)

"""
Staff attendance endpoints.

- POST /attendance/checkin and /attendance/checkout are staff-only.
- Every read (today / list / report) is swept before it is returned.
- Listing is role-scoped: staff see their own records, franchise owners
  their franchise, admins everything (optionally filtered).
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import (get_blob_store, get_current_identity, get_db,
                             get_now, require_manager, require_staff)
from app.schemas.attendance import (AttendanceRead, AttendanceReportResponse,
                                    CheckinRequest, CheckinResponse,
                                    CheckoutResponse, ScoreResponse,
                                    ScoreUpdate, StaffReportRow)
from app.schemas.identity import Identity
from app.services import attendance as lifecycle
from app.services.clock import format_minutes, local_date, month_label
from app.services.photos import BlobStore
from app.services.reports import ReportRange, attendance_report

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


def _score_update(outcome) -> ScoreUpdate | None:
    return ScoreUpdate.model_validate(outcome) if outcome is not None else None


# ── Check-in / check-out ────────────────────────────────────────────
@router.post("/checkin", response_model=CheckinResponse, status_code=201)
async def checkin(
    body: CheckinRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_staff),
    blob_store: BlobStore = Depends(get_blob_store),
    now: datetime = Depends(get_now),
) -> CheckinResponse:
    """Open today's attendance record. Requires all four photos."""
    result = await lifecycle.check_in(db, identity, body.model_dump(), blob_store, now=now)
    late = result.verdict.is_late
    return CheckinResponse(
        message="Checked in (Late - score deducted)" if late else "Checked in successfully",
        attendance=AttendanceRead.model_validate(result.record),
        tolerance_minutes=result.verdict.tolerance,
        allowed_late_until=format_minutes(result.verdict.allowed_late_boundary),
        score_update=_score_update(result.score_update),
    )


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_staff),
    now: datetime = Depends(get_now),
) -> CheckoutResponse:
    """Close today's attendance record."""
    result = await lifecycle.check_out(db, identity, now=now)
    duration = result.record.shift_duration or 0
    hours = round(duration / 60, 1)
    if result.verdict.is_early:
        message = f"Checked out (Early - {hours} hours, score deducted)"
    else:
        message = f"Checked out successfully ({hours} hours)"
    window_start, window_end = result.verdict.allowed_window
    return CheckoutResponse(
        message=message,
        attendance=AttendanceRead.model_validate(result.record),
        shift_duration=duration,
        shift_duration_hours=round(duration / 60, 2),
        is_early_checkout=result.verdict.is_early,
        is_late_checkout=result.verdict.is_late,
        allowed_window=(format_minutes(window_start), format_minutes(window_end)),
        score_update=_score_update(result.score_update),
    )


# ── Reads ───────────────────────────────────────────────────────────
@router.get("/today", response_model=AttendanceRead | None)
async def today(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_staff),
    now: datetime = Depends(get_now),
) -> AttendanceRead | None:
    """The caller's record for the current local day, or null."""
    record = await lifecycle.get_today_record(db, identity.staff_id, now=now)
    return AttendanceRead.model_validate(record) if record is not None else None


@router.get("/score", response_model=ScoreResponse)
async def score(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_staff),
    now: datetime = Depends(get_now),
) -> ScoreResponse:
    """The caller's live score for the current month."""
    value = await lifecycle.current_score(db, identity.staff_id, now=now)
    return ScoreResponse(staff_id=identity.staff_id, score=value, month=month_label(now))


@router.get("", response_model=list[AttendanceRead])
async def list_attendance(
    staff_id: str | None = None,
    franchise_id: str | None = None,
    day: date | None = Query(default=None, alias="date"),
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    now: datetime = Depends(get_now),
) -> list[AttendanceRead]:
    if identity.is_staff:
        staff_id, franchise_id = identity.staff_id, None
    elif identity.is_franchise_owner and identity.franchise_id:
        franchise_id = identity.franchise_id
    elif not identity.is_admin:
        raise HTTPException(status_code=403, detail="Access denied")

    if start_date and end_date:
        start, end = start_date.isoformat(), end_date.isoformat()
    elif day:
        start = end = day.isoformat()
    else:
        start = end = None

    records = await lifecycle.list_records(
        db,
        now=now,
        staff_id=staff_id,
        franchise_id=franchise_id,
        start_date=start,
        end_date=end,
    )
    return [AttendanceRead.model_validate(r) for r in records]


@router.get("/report", response_model=AttendanceReportResponse)
async def report(
    report_type: ReportRange = Query(default=ReportRange.DAY, alias="type"),
    day: date | None = Query(default=None, alias="date"),
    franchise_id: str | None = None,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_manager),
    now: datetime = Depends(get_now),
) -> AttendanceReportResponse:
    """Daily or weekly per-staff summary for a franchise (or all, for admins)."""
    target_franchise = franchise_id if identity.is_admin else identity.franchise_id
    anchor = day or date.fromisoformat(local_date(now))

    result = await attendance_report(
        db, kind=report_type, anchor=anchor, franchise_id=target_franchise, now=now
    )
    return AttendanceReportResponse(
        report_type=result.report_type.value,
        start_date=result.start_date,
        end_date=result.end_date,
        franchise_id=result.franchise_id,
        report=[StaffReportRow.model_validate(row) for row in result.report],
    )

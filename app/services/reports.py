"""
Per-staff attendance summaries over a day or an ISO week.

Records are swept before they are counted, so a shift left open past the
auto-checkout ceiling shows up closed (and its deduction is in the score).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.attendance import AttendanceRecord
from app.models.staff import Staff
from app.repositories.attendance import query_records
from app.repositories.staff import list_staff
from app.services.clock import utcnow
from app.services.scoring import effective_score
from app.services.sweeper import sweep_records


class ReportRange(str, Enum):
    DAY = "daily"
    WEEK = "weekly"


@dataclass
class StaffSummary:
    staff_id: str
    employee_id: str | None
    staff_name: str
    score: int
    present_days: int
    late_days: int
    early_checkout_days: int
    attendance: list[AttendanceRecord] = field(default_factory=list)


@dataclass
class AttendanceReport:
    report_type: ReportRange
    start_date: date
    end_date: date
    franchise_id: str | None
    report: list[StaffSummary]


def report_range(kind: ReportRange, anchor: date) -> tuple[date, date]:
    """Inclusive range: the anchor day, or Monday..Sunday of its week."""
    if kind is ReportRange.WEEK:
        monday = anchor - timedelta(days=anchor.weekday())
        return monday, monday + timedelta(days=6)
    return anchor, anchor


def build_report(
    staff_list: list[Staff],
    records: list[AttendanceRecord],
    now: datetime | None = None,
) -> list[StaffSummary]:
    now = now or utcnow()
    by_staff: dict[str, list[AttendanceRecord]] = defaultdict(list)
    for record in records:
        by_staff[record.staff_id].append(record)

    summaries = []
    for staff in staff_list:
        own = by_staff.get(staff.id, [])
        summaries.append(
            StaffSummary(
                staff_id=staff.id,
                employee_id=staff.employee_id,
                staff_name=staff.name,
                score=effective_score(staff, now),
                present_days=sum(1 for r in own if r.checkin_time is not None),
                late_days=sum(1 for r in own if r.is_late),
                early_checkout_days=sum(1 for r in own if r.is_early_checkout),
                attendance=own,
            )
        )
    return summaries


async def attendance_report(
    db: AsyncSession,
    *,
    kind: ReportRange,
    anchor: date,
    franchise_id: str | None = None,
    now: datetime | None = None,
) -> AttendanceReport:
    now = now or utcnow()
    start, end = report_range(kind, anchor)

    records = await query_records(
        db,
        franchise_id=franchise_id,
        start_date=start.isoformat(),
        end_date=end.isoformat(),
    )
    records = await sweep_records(db, records, now)
    # Loaded after the sweep so scores include any auto-checkout deductions.
    staff_list = await list_staff(db, roles=settings.STAFF_ROLES, franchise_id=franchise_id)

    return AttendanceReport(
        report_type=kind,
        start_date=start,
        end_date=end,
        franchise_id=franchise_id,
        report=build_report(staff_list, records, now),
    )

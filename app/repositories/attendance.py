"""Attendance store queries.

Callers must pass everything read here through the sweeper before it leaves
the service.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import AttendanceRecord


async def get_for_staff_and_date(
    db: AsyncSession, staff_id: str, date_str: str
) -> AttendanceRecord | None:
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.staff_id == staff_id,
            AttendanceRecord.date == date_str,
        )
    )
    return result.scalar_one_or_none()


async def query_records(
    db: AsyncSession,
    *,
    staff_id: str | None = None,
    franchise_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[AttendanceRecord]:
    """Filter by staff and/or franchise over an inclusive date range, newest first."""
    query = select(AttendanceRecord)
    if staff_id:
        query = query.where(AttendanceRecord.staff_id == staff_id)
    if franchise_id:
        query = query.where(AttendanceRecord.franchise_id == franchise_id)
    if start_date:
        query = query.where(AttendanceRecord.date >= start_date)
    if end_date:
        query = query.where(AttendanceRecord.date <= end_date)
    query = query.order_by(AttendanceRecord.date.desc(), AttendanceRecord.checkin_time.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def close_if_open(db: AsyncSession, record_id: str, **values) -> bool:
    """Conditionally close a record; ``False`` if someone closed it first."""
    result = await db.execute(
        update(AttendanceRecord)
        .where(
            AttendanceRecord.id == record_id,
            AttendanceRecord.checkout_time.is_(None),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1

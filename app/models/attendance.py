"""
Attendance record: one staff member's one shift day.

Identity fields are copied from the acting user at check-in; the scheduled
shift is captured at check-in so later shift edits never rewrite history.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, Index, Integer, String,
                        UniqueConstraint)

from app.db.base import Base


class AttendanceStatus:
    ON_TIME = "ON_TIME"
    LATE = "LATE"
    EARLY = "EARLY"
    CHECKED_OUT = "CHECKED_OUT"
    EARLY_CHECKOUT = "EARLY_CHECKOUT"
    AUTO_CHECKOUT = "AUTO_CHECKOUT"


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("staff_id", "date", name="uq_attendance_staff_date"),
        Index("ix_attendance_franchise_date", "franchise_id", "date"),
    )

    id: str = Column(String(64), primary_key=True)  # type: ignore[assignment]
    staff_id: str = Column(String(64), nullable=False, index=True)  # type: ignore[assignment]
    staff_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    employee_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    franchise_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    franchise_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD, local

    checkin_time: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    checkout_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    scheduled_start_time: str = Column(String(5), nullable=False)  # type: ignore[assignment]
    scheduled_end_time: str = Column(String(5), nullable=False)  # type: ignore[assignment]

    is_late: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    is_early_checkin: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    is_early_checkout: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    # ON_TIME | LATE | EARLY -> CHECKED_OUT | EARLY_CHECKOUT | AUTO_CHECKOUT
    shift_duration: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]  # minutes
    score_deduction: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    deduction_reason: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]

    selfie_photo: str = Column(String(1024), nullable=False)  # type: ignore[assignment]
    shoes_photo: str = Column(String(1024), nullable=False)  # type: ignore[assignment]
    uniform_photo: str = Column(String(1024), nullable=False)  # type: ignore[assignment]
    workstation_photo: str = Column(String(1024), nullable=False)  # type: ignore[assignment]

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]

    @property
    def is_open(self) -> bool:
        return self.checkout_time is None

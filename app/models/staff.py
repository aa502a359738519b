"""
Staff model: the staff directory entry the attendance engine reads.

Holds the configured shift and the disciplinary score. ``score_last_reset`` is
the ``YYYY-MM`` label the stored score is valid for; ``version`` guards score
updates against lost writes.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from app.db.base import Base


class Staff(Base):
    __tablename__ = "staff"
    __table_args__ = (Index("ix_staff_franchise_role", "franchise_id", "role"),)

    id: str = Column(String(64), primary_key=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    employee_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    role: str = Column(String(30), nullable=False, default="FRANCHISE_STAFF")  # type: ignore[assignment]
    franchise_id: str | None = Column(String(64), nullable=True, index=True)  # type: ignore[assignment]
    franchise_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    shift_start_time: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]  # HH:MM
    shift_end_time: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]  # HH:MM
    score: int | None = Column(Integer, nullable=True, default=100)  # type: ignore[assignment]
    score_last_reset: str | None = Column(String(7), nullable=True)  # type: ignore[assignment]  # YYYY-MM
    version: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]

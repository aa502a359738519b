"""Pydantic schemas for check-in / check-out / attendance reads and reports."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, field_validator

from app.services.clock import ensure_utc


# ── Check-in ────────────────────────────────────────────────────────
class CheckinRequest(BaseModel):
    """Four photos, each a base64 image data URL or an already uploaded URL.

    Left optional here so a missing photo gets the domain error message
    instead of a generic 422.
    """

    selfie_photo: str | None = None
    shoes_photo: str | None = None
    uniform_photo: str | None = None
    workstation_photo: str | None = None


# ── Attendance ──────────────────────────────────────────────────────
class AttendanceRead(BaseModel):
    id: str
    staff_id: str
    staff_name: str | None
    employee_id: str | None
    franchise_id: str | None
    franchise_name: str | None
    date: str
    checkin_time: datetime
    checkout_time: datetime | None
    scheduled_start_time: str
    scheduled_end_time: str
    is_late: bool
    is_early_checkin: bool
    is_early_checkout: bool
    status: str
    shift_duration: int | None
    score_deduction: int
    deduction_reason: str | None
    selfie_photo: str
    shoes_photo: str
    uniform_photo: str
    workstation_photo: str

    model_config = {"from_attributes": True}

    @field_validator("checkin_time", "checkout_time")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None


class ScoreUpdate(BaseModel):
    previous_score: int
    new_score: int
    deduction: int
    reason: str

    model_config = {"from_attributes": True}


class CheckinResponse(BaseModel):
    success: bool = True
    message: str
    attendance: AttendanceRead
    tolerance_minutes: int
    allowed_late_until: str  # HH:MM local
    score_update: ScoreUpdate | None = None


class CheckoutResponse(BaseModel):
    success: bool = True
    message: str
    attendance: AttendanceRead
    shift_duration: int  # minutes
    shift_duration_hours: float
    is_early_checkout: bool
    is_late_checkout: bool
    allowed_window: tuple[str, str]  # HH:MM local
    score_update: ScoreUpdate | None = None


class ScoreResponse(BaseModel):
    staff_id: str
    score: int
    month: str


# ── Report ──────────────────────────────────────────────────────────
class StaffReportRow(BaseModel):
    staff_id: str
    employee_id: str | None
    staff_name: str
    score: int
    present_days: int
    late_days: int
    early_checkout_days: int
    attendance: list[AttendanceRead]

    model_config = {"from_attributes": True}


class AttendanceReportResponse(BaseModel):
    report_type: str
    start_date: date
    end_date: date
    franchise_id: str | None
    report: list[StaffReportRow]

    model_config = {"from_attributes": True}


# ── Health ──────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool

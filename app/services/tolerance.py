"""
Shift-relative tolerance rules.

The tolerance is a percentage of the scheduled shift length (5% by default,
rounded to the nearest whole minute, halves rounding up). Arriving early is
never penalised; only a check-in after ``start + tolerance`` is late. On the
way out, only leaving before ``end - tolerance`` counts as early.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.core.config import settings
from app.core.exceptions import InvalidShiftConfiguration
from app.services.clock import parse_shift_boundary


@dataclass(frozen=True)
class CheckinVerdict:
    is_late: bool
    is_early: bool
    tolerance: int
    allowed_late_boundary: int


@dataclass(frozen=True)
class CheckoutVerdict:
    is_within_tolerance: bool
    is_early: bool
    is_late: bool
    tolerance: int
    allowed_window: tuple[int, int]


def shift_window(start_text: str, end_text: str) -> tuple[int, int]:
    """Parse a configured shift, rejecting empty or inverted ones."""
    start = parse_shift_boundary(start_text)
    end = parse_shift_boundary(end_text)
    if end <= start:
        raise InvalidShiftConfiguration(
            f"Shift {start_text}-{end_text} must end after it starts"
        )
    return start, end


def compute_tolerance(scheduled_start: int, scheduled_end: int, percent: int | None = None) -> int:
    if scheduled_end <= scheduled_start:
        raise InvalidShiftConfiguration()
    pct = settings.SHIFT_TOLERANCE_PERCENT if percent is None else percent
    # Integer form of round-half-up(length * pct / 100)
    return ((scheduled_end - scheduled_start) * pct + 50) // 100


def evaluate_checkin(actual: int, scheduled_start: int, scheduled_end: int) -> CheckinVerdict:
    tolerance = compute_tolerance(scheduled_start, scheduled_end)
    boundary = scheduled_start + tolerance
    return CheckinVerdict(
        is_late=actual > boundary,
        is_early=actual < scheduled_start,
        tolerance=tolerance,
        allowed_late_boundary=boundary,
    )


def evaluate_checkout(actual: int, scheduled_start: int, scheduled_end: int) -> CheckoutVerdict:
    tolerance = compute_tolerance(scheduled_start, scheduled_end)
    window = (scheduled_end - tolerance, scheduled_end + tolerance)
    return CheckoutVerdict(
        is_within_tolerance=window[0] <= actual <= window[1],
        is_early=actual < window[0],
        is_late=actual > window[1],
        tolerance=tolerance,
        allowed_window=window,
    )

"""
Per-staff disciplinary score.

Scores live in ``[0, 100]`` and reset to 100 at the start of every calendar
month. There is no reset job: a stored score whose ``score_last_reset`` label
is not the current month is simply read as 100, and the next deduction
persists the new month label.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.staff import Staff
from app.repositories.staff import get_staff, update_score_if_unchanged
from app.services.clock import month_label, utcnow

logger = logging.getLogger(__name__)

MAX_SCORE = 100

LATE_CHECKIN = 5
# No code path applies this yet: nothing detects a day with no check-in at all.
MISSED_CHECKIN = 10
NO_CHECKOUT = 10
EARLY_CHECKOUT = 5


@dataclass(frozen=True)
class Deducted:
    previous_score: int
    new_score: int
    deduction: int
    reason: str

    applied = True


@dataclass(frozen=True)
class Skipped:
    staff_id: str
    deduction: int
    reason: str
    skip_reason: str

    applied = False


ScoreOutcome = Deducted | Skipped


def effective_score(staff: Staff, now: datetime | None = None) -> int:
    """Stored score if it belongs to the current month, else a fresh 100."""
    now = now or utcnow()
    if staff.score is None or staff.score_last_reset != month_label(now):
        return MAX_SCORE
    return staff.score


async def apply_deduction(
    db: AsyncSession,
    staff_id: str,
    amount: int,
    reason: str,
    *,
    now: datetime | None = None,
) -> ScoreOutcome:
    """Deduct *amount* from the staff member's score, floored at 0.

    A missing staff entry or a storage error skips the deduction without
    failing the caller. Each attempt runs in a savepoint so the caller's
    transaction stays usable. Concurrent writers are detected through the
    staff ``version`` column and the read-modify-write is retried.
    """
    now = now or utcnow()
    month = month_label(now)

    for attempt in range(settings.SCORE_UPDATE_MAX_RETRIES + 1):
        try:
            # Savepoint: a failed statement must not poison the caller's transaction.
            async with db.begin_nested():
                staff = await get_staff(db, staff_id, fresh=True)
                if staff is None:
                    logger.warning("Score deduction skipped: staff %s not found (%s)", staff_id, reason)
                    return Skipped(staff_id, amount, reason, "staff not found")

                previous = effective_score(staff, now)
                new_score = max(0, previous - amount)
                updated = await update_score_if_unchanged(
                    db, staff, score=new_score, month=month, now=now
                )
        except SQLAlchemyError as e:
            logger.warning("Score deduction skipped for %s: storage error: %s", staff_id, e)
            return Skipped(staff_id, amount, reason, "storage error")

        if updated:
            await db.refresh(staff)
            logger.info(
                "Score for %s: %d -> %d (-%d, %s)", staff_id, previous, new_score, amount, reason
            )
            return Deducted(previous, new_score, amount, reason)

        logger.info("Score update conflict for %s (attempt %d), retrying", staff_id, attempt + 1)

    logger.warning("Score deduction for %s abandoned after repeated conflicts", staff_id)
    return Skipped(staff_id, amount, reason, "concurrent update conflict")

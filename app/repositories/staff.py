"""Staff directory queries."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.staff import Staff


async def get_staff(db: AsyncSession, staff_id: str, *, fresh: bool = False) -> Staff | None:
    query = select(Staff).where(Staff.id == staff_id)
    if fresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def list_staff(
    db: AsyncSession,
    *,
    roles: list[str],
    franchise_id: str | None = None,
) -> list[Staff]:
    query = (
        select(Staff)
        .where(Staff.role.in_(roles), Staff.is_active.is_(True))
        .order_by(Staff.name)
    )
    if franchise_id:
        query = query.where(Staff.franchise_id == franchise_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_score_if_unchanged(
    db: AsyncSession,
    staff: Staff,
    *,
    score: int,
    month: str,
    now: datetime,
) -> bool:
    """Compare-and-set the score against the version read earlier.

    Returns ``False`` when another writer bumped the version first.
    """
    result = await db.execute(
        update(Staff)
        .where(Staff.id == staff.id, Staff.version == staff.version)
        .values(
            score=score,
            score_last_reset=month,
            updated_at=now,
            version=Staff.version + 1,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1

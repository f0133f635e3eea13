from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import UserActivity


async def get_activity(
    session: AsyncSession, user_id: int, activity_date: date, action_type: str
) -> UserActivity | None:
    result = await session.execute(
        select(UserActivity).where(
            UserActivity.user_id == user_id,
            UserActivity.activity_date == activity_date,
            UserActivity.action_type == action_type,
        )
    )
    return result.scalar_one_or_none()


async def add_activity(
    session: AsyncSession,
    user_id: int,
    activity_date: date,
    action_type: str,
    value: int,
    details: dict | None,
) -> UserActivity:
    entry = UserActivity(
        user_id=user_id,
        activity_date=activity_date,
        action_type=action_type,
        value=value,
        details=details,
    )
    session.add(entry)
    return entry


async def count_active_days(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count(func.distinct(UserActivity.activity_date))).where(
            UserActivity.user_id == user_id
        )
    )
    return result.scalar_one()


async def list_activity_between(
    session: AsyncSession,
    user_id: int,
    start: date,
    end: date,
    limit: int | None = None,
) -> list[UserActivity]:
    query = (
        select(UserActivity)
        .where(UserActivity.user_id == user_id)
        .where(UserActivity.activity_date.between(start, end))
        .order_by(
            UserActivity.activity_date.desc(),
            UserActivity.created_at.desc(),
            UserActivity.id.desc(),
        )
    )
    if limit is not None:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def daily_counts_since(
    session: AsyncSession, user_id: int, start: date
) -> list[tuple[date, int]]:
    result = await session.execute(
        select(UserActivity.activity_date, func.count(UserActivity.id))
        .where(UserActivity.user_id == user_id)
        .where(UserActivity.activity_date >= start)
        .group_by(UserActivity.activity_date)
        .order_by(UserActivity.activity_date)
    )
    return [(row[0], row[1]) for row in result.all()]

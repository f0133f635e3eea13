from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import UserStreak


async def get_streak(
    session: AsyncSession, user_id: int, streak_type: str
) -> UserStreak | None:
    result = await session.execute(
        select(UserStreak).where(
            UserStreak.user_id == user_id, UserStreak.streak_type == streak_type
        )
    )
    return result.scalar_one_or_none()


async def list_streaks(session: AsyncSession, user_id: int) -> list[UserStreak]:
    result = await session.execute(
        select(UserStreak)
        .where(UserStreak.user_id == user_id)
        .order_by(UserStreak.streak_type)
    )
    return list(result.scalars().all())

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import UserStreak
from coach.repositories import streaks as streak_repo


def next_streak(current: int, last_activity: date | None, today: date) -> int:
    if last_activity is not None and (today - last_activity).days == 1:
        return current + 1
    return 1


async def record_activity(
    session: AsyncSession, user_id: int, streak_type: str, today: date
) -> UserStreak:
    streak = await streak_repo.get_streak(session, user_id, streak_type)
    if streak is None:
        streak = UserStreak(
            user_id=user_id,
            streak_type=streak_type,
            current_streak=1,
            longest_streak=1,
            last_activity_date=today,
        )
        session.add(streak)
        return streak

    if streak.last_activity_date == today:
        return streak

    streak.current_streak = next_streak(
        streak.current_streak, streak.last_activity_date, today
    )
    streak.longest_streak = max(streak.longest_streak, streak.current_streak)
    streak.last_activity_date = today
    return streak

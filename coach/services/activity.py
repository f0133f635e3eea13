import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import SessionType, UserActivity
from coach.repositories import activity as activity_repo
from coach.repositories.coach_sessions import count_sessions_for_user
from coach.repositories.streaks import get_streak


logger = logging.getLogger(__name__)

RECENT_DAYS = 7
RECENT_LIMIT = 20
ENGAGEMENT_DAYS = 14
DEFAULT_RANGE_DAYS = 30


@dataclass(frozen=True)
class UserProgress:
    total_check_ins: int
    days_active: int
    current_streak: int
    longest_streak: int
    recent_activity: list[UserActivity] = field(default_factory=list)
    weekly_engagement: list[tuple[date, int]] = field(default_factory=list)


def _today() -> date:
    return datetime.now(timezone.utc).date()


async def log_activity(
    session: AsyncSession,
    user_id: int,
    action_type: str,
    value: int = 1,
    details: dict | None = None,
    today: date | None = None,
) -> UserActivity:
    """Record an action for the day; repeats of the same action add to ``value``.

    Commit is left to the caller.
    """
    today = today or _today()
    entry = await activity_repo.get_activity(session, user_id, today, action_type)
    if entry is None:
        entry = await activity_repo.add_activity(
            session, user_id, today, action_type, value, details
        )
    else:
        entry.value += value
    await session.flush()
    logger.info(
        "Activity logged",
        extra={"user_id": user_id, "action_type": action_type, "value": value},
    )
    return entry


async def get_user_progress(
    session: AsyncSession, user_id: int, today: date | None = None
) -> UserProgress:
    today = today or _today()
    streak = await get_streak(session, user_id, SessionType.DAILY_CHECKIN)
    return UserProgress(
        total_check_ins=await count_sessions_for_user(session, user_id),
        days_active=await activity_repo.count_active_days(session, user_id),
        current_streak=streak.current_streak if streak else 0,
        longest_streak=streak.longest_streak if streak else 0,
        recent_activity=await activity_repo.list_activity_between(
            session,
            user_id,
            today - timedelta(days=RECENT_DAYS),
            today,
            limit=RECENT_LIMIT,
        ),
        weekly_engagement=await activity_repo.daily_counts_since(
            session, user_id, today - timedelta(days=ENGAGEMENT_DAYS)
        ),
    )


async def get_activity_range(
    session: AsyncSession,
    user_id: int,
    start: date | None = None,
    end: date | None = None,
    today: date | None = None,
) -> list[UserActivity]:
    end = end or today or _today()
    start = start or end - timedelta(days=DEFAULT_RANGE_DAYS)
    return await activity_repo.list_activity_between(session, user_id, start, end)

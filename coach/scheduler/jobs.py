import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coach.ai.adapter import CoachMessageGenerator
from coach.db.models import SessionType
from coach.repositories import users as user_repo
from coach.services.coach_sessions import generate_session
from coach.services.notifications import ReminderSettings, get_reminder_settings
from coach.services.streaks import record_activity
from coach.services.tiers import TIER_ORDER


logger = logging.getLogger(__name__)


@dataclass
class DispatchSummary:
    session_type: str
    sent: int = 0
    skipped: int = 0
    failed: int = 0

    def as_dict(self) -> dict:
        return {
            "sessionType": self.session_type,
            "sent": self.sent,
            "skipped": self.skipped,
            "failed": self.failed,
        }


@dataclass(frozen=True)
class _CheckInKind:
    session_type: str
    topic: str | None
    title_prefix: str

    def enabled_for(self, prefs: ReminderSettings) -> bool:
        if self.session_type == SessionType.WEEKLY_REFLECTION:
            return prefs.weekly_enabled
        return prefs.daily_enabled


DAILY = _CheckInKind(SessionType.DAILY_CHECKIN, None, "")
WEEKLY = _CheckInKind(
    SessionType.WEEKLY_REFLECTION, "weekly_reflection", "Weekly Reflection: "
)


async def _dispatch(
    session: AsyncSession,
    generator: CoachMessageGenerator,
    kind: _CheckInKind,
    now: datetime,
) -> DispatchSummary:
    summary = DispatchSummary(session_type=kind.session_type)
    users = await user_repo.list_users_with_tiers(session, TIER_ORDER)
    # Plain values only: a rollback below expires every loaded instance.
    targets = [(u.id, u.first_name, u.relationship_status) for u in users]
    logger.info(
        "Check-in batch started",
        extra={"session_type": kind.session_type, "users": len(targets)},
    )

    for user_id, first_name, relationship_status in targets:
        try:
            prefs = await get_reminder_settings(session, user_id)
            if not kind.enabled_for(prefs):
                summary.skipped += 1
                continue

            user_context = {
                "firstName": first_name,
                "relationshipStatus": relationship_status,
            }
            if kind.topic:
                user_context["topic"] = kind.topic
            await generate_session(
                session,
                generator,
                user_id=user_id,
                user_context=user_context,
                session_type=kind.session_type,
                title_prefix=kind.title_prefix,
            )
            await record_activity(session, user_id, kind.session_type, now.date())
            await session.commit()
            summary.sent += 1
        except Exception:
            # One user's failure must not stop the batch.
            await session.rollback()
            summary.failed += 1
            logger.exception(
                "Check-in failed for user",
                extra={"user_id": user_id, "session_type": kind.session_type},
            )

    logger.info("Check-in batch finished", extra=summary.as_dict())
    return summary


async def send_daily_checkins(
    session_factory: async_sessionmaker,
    generator: CoachMessageGenerator,
    now: datetime | None = None,
) -> DispatchSummary:
    now = now or datetime.now(timezone.utc)
    async with session_factory() as session:
        return await _dispatch(session, generator, DAILY, now)


async def send_weekly_reflections(
    session_factory: async_sessionmaker,
    generator: CoachMessageGenerator,
    now: datetime | None = None,
) -> DispatchSummary:
    now = now or datetime.now(timezone.utc)
    async with session_factory() as session:
        return await _dispatch(session, generator, WEEKLY, now)

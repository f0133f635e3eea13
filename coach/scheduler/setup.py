from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import async_sessionmaker

from coach.ai.adapter import CoachMessageGenerator
from coach.db.session import AsyncSessionLocal
from coach.scheduler import jobs
from config import settings


def setup_scheduler(
    generator: CoachMessageGenerator,
    session_factory: async_sessionmaker = AsyncSessionLocal,
) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)

    scheduler.add_job(
        jobs.send_daily_checkins,
        "cron",
        hour=settings.checkin_hour,
        minute=0,
        args=[session_factory, generator],
        id="daily_checkin",
        replace_existing=True,
    )
    scheduler.add_job(
        jobs.send_weekly_reflections,
        "cron",
        day_of_week=settings.weekly_reflection_day,
        hour=settings.checkin_hour,
        minute=0,
        args=[session_factory, generator],
        id="weekly_reflection",
        replace_existing=True,
    )

    return scheduler

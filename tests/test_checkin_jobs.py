from datetime import datetime, timezone

from sqlalchemy import select

from coach.ai.adapter import CoachGenerationError
from coach.ai.template_adapter import TemplateCoachGenerator
from coach.db.models import CoachSession, NotificationPreference, UserStreak
from coach.scheduler.jobs import send_daily_checkins, send_weekly_reflections
from coach.scheduler.setup import setup_scheduler


NOW = datetime(2024, 5, 6, 9, 0, tzinfo=timezone.utc)


class FlakyGenerator(TemplateCoachGenerator):
    def __init__(self, failing_names):
        self.failing_names = set(failing_names)

    async def generate_guidance(self, user_context):
        if user_context.get("firstName") in self.failing_names:
            raise CoachGenerationError("upstream down")
        return await super().generate_guidance(user_context)


async def test_daily_checkins_respect_preferences(db_session, session_factory, make_user):
    sam = await make_user(first_name="Sam")
    kim = await make_user(tier="pro", first_name="Kim")
    db_session.add(
        NotificationPreference(user_id=kim.id, reminder_type="daily", enabled=False)
    )
    await db_session.commit()

    summary = await send_daily_checkins(session_factory, TemplateCoachGenerator(), now=NOW)

    assert (summary.sent, summary.skipped, summary.failed) == (1, 1, 0)
    rows = (await db_session.execute(select(CoachSession))).scalars().all()
    assert [row.user_id for row in rows] == [sam.id]
    assert rows[0].session_type == "daily_checkin"
    assert rows[0].user_context["type"] == "daily_checkin"
    assert rows[0].user_context["firstName"] == "Sam"

    streak = (await db_session.execute(select(UserStreak))).scalar_one()
    assert streak.user_id == sam.id
    assert streak.current_streak == 1


async def test_one_failure_does_not_stop_the_batch(db_session, session_factory, make_user):
    await make_user(first_name="Ann")
    await make_user(first_name="Bob")
    await make_user(first_name="Cid")

    summary = await send_daily_checkins(
        session_factory, FlakyGenerator({"Bob"}), now=NOW
    )

    assert summary.as_dict() == {
        "sessionType": "daily_checkin",
        "sent": 2,
        "skipped": 0,
        "failed": 1,
    }
    count = len((await db_session.execute(select(CoachSession))).scalars().all())
    assert count == 2


async def test_weekly_reflection_prefixes_title(db_session, session_factory, make_user):
    user = await make_user(first_name="Lee", relationship_status="married")
    db_session.add(
        NotificationPreference(user_id=user.id, reminder_type="daily", enabled=False)
    )
    await db_session.commit()

    summary = await send_weekly_reflections(
        session_factory, TemplateCoachGenerator(), now=NOW
    )

    assert summary.sent == 1
    row = (await db_session.execute(select(CoachSession))).scalar_one()
    assert row.message_title == "Weekly Reflection: Look Back Together"
    assert row.session_type == "weekly_reflection"
    assert row.user_context["topic"] == "weekly_reflection"
    assert row.user_context["relationshipStatus"] == "married"


def test_scheduler_registers_both_jobs(session_factory):
    scheduler = setup_scheduler(TemplateCoachGenerator(), session_factory=session_factory)

    jobs = {job.id: job for job in scheduler.get_jobs()}
    assert set(jobs) == {"daily_checkin", "weekly_reflection"}
    assert jobs["daily_checkin"].func is send_daily_checkins
    assert jobs["weekly_reflection"].args[0] is session_factory

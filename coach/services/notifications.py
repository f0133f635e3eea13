from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import ReminderType
from coach.repositories import notifications as notification_repo


@dataclass(frozen=True)
class ReminderSettings:
    daily_enabled: bool
    weekly_enabled: bool


async def get_reminder_settings(session: AsyncSession, user_id: int) -> ReminderSettings:
    prefs = await notification_repo.list_preferences(session, user_id)
    # No row for a reminder type means it is on.
    enabled = {pref.reminder_type: pref.enabled for pref in prefs}
    return ReminderSettings(
        daily_enabled=enabled.get(ReminderType.DAILY, True),
        weekly_enabled=enabled.get(ReminderType.WEEKLY, True),
    )

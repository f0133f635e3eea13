from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import NotificationPreference, utcnow


async def list_preferences(
    session: AsyncSession, user_id: int
) -> list[NotificationPreference]:
    result = await session.execute(
        select(NotificationPreference)
        .where(NotificationPreference.user_id == user_id)
        .order_by(NotificationPreference.reminder_type)
    )
    return list(result.scalars().all())


async def get_preference(
    session: AsyncSession, user_id: int, reminder_type: str
) -> NotificationPreference | None:
    result = await session.execute(
        select(NotificationPreference).where(
            NotificationPreference.user_id == user_id,
            NotificationPreference.reminder_type == reminder_type,
        )
    )
    return result.scalar_one_or_none()


async def upsert_preference(
    session: AsyncSession,
    user_id: int,
    reminder_type: str,
    enabled: bool,
    time_preference: str | None,
) -> NotificationPreference:
    pref = await get_preference(session, user_id, reminder_type)
    if pref:
        pref.enabled = enabled
        pref.time_preference = time_preference
        return pref
    pref = NotificationPreference(
        user_id=user_id,
        reminder_type=reminder_type,
        enabled=enabled,
        time_preference=time_preference,
    )
    session.add(pref)
    return pref


async def set_push_token(session: AsyncSession, user_id: int, push_token: str) -> int:
    result = await session.execute(
        update(NotificationPreference)
        .where(NotificationPreference.user_id == user_id)
        .values(push_token=push_token, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount

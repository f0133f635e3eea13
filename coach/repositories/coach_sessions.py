from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import CoachSession


async def add_coach_session(
    session: AsyncSession,
    user_id: int,
    title: str,
    body: str,
    call_to_action: str | None,
    session_type: str,
    user_context: dict | None,
) -> CoachSession:
    entry = CoachSession(
        user_id=user_id,
        message_title=title,
        message_body=body,
        call_to_action=call_to_action,
        session_type=session_type,
        user_context=user_context,
    )
    session.add(entry)
    return entry


async def list_sessions_for_user(
    session: AsyncSession, user_id: int, limit: int = 50
) -> list[CoachSession]:
    result = await session.execute(
        select(CoachSession)
        .where(CoachSession.user_id == user_id)
        .order_by(CoachSession.created_at.desc(), CoachSession.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_coach_session(
    session: AsyncSession, session_id: int
) -> CoachSession | None:
    result = await session.execute(
        select(CoachSession).where(CoachSession.id == session_id)
    )
    return result.scalar_one_or_none()


async def count_sessions_for_user(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count(CoachSession.id)).where(CoachSession.user_id == user_id)
    )
    return result.scalar_one()

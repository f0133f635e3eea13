from sqlalchemy.ext.asyncio import AsyncSession

from coach.ai.adapter import CoachMessage, CoachMessageGenerator
from coach.db.models import CoachSession, SessionType
from coach.repositories.coach_sessions import add_coach_session


async def generate_session(
    session: AsyncSession,
    generator: CoachMessageGenerator,
    user_id: int,
    user_context: dict,
    session_type: str = SessionType.MANUAL,
    title_prefix: str = "",
) -> tuple[CoachMessage, CoachSession]:
    # Commit is left to the caller.
    message = await generator.generate_guidance(user_context)
    entry = await add_coach_session(
        session,
        user_id=user_id,
        title=f"{title_prefix}{message.title}",
        body=message.body,
        call_to_action=message.call_to_action,
        session_type=session_type,
        user_context={"type": session_type, **user_context},
    )
    await session.flush()
    return message, entry

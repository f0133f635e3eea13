import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from coach.ai.adapter import CoachGenerationError, CoachMessageGenerator
from coach.api.deps import get_generator, get_session, load_user
from coach.api.errors import ok
from coach.api.schemas import (
    ChatRequest,
    CoachMessageOut,
    CoachRequest,
    CoachSessionOut,
    StreakOut,
    dump,
)
from coach.db.models import SessionType
from coach.repositories.coach_sessions import get_coach_session, list_sessions_for_user
from coach.repositories.streaks import list_streaks
from coach.services.coach_sessions import generate_session


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai-coach", tags=["ai-coach"])


@router.post("")
async def create_guidance(
    body: CoachRequest,
    session: AsyncSession = Depends(get_session),
    generator: CoachMessageGenerator = Depends(get_generator),
) -> dict:
    user = await load_user(session, body.user_id)
    user_context = {
        "firstName": body.first_name or user.first_name,
        "relationshipStatus": body.relationship_status or user.relationship_status,
    }
    if body.topic:
        user_context["topic"] = body.topic
    if body.mood:
        user_context["mood"] = body.mood

    try:
        message, entry = await generate_session(
            session,
            generator,
            user_id=user.id,
            user_context=user_context,
            session_type=SessionType.MANUAL,
        )
    except CoachGenerationError as exc:
        raise HTTPException(status_code=500, detail="Failed to get AI coach response") from exc
    await session.commit()

    return ok(
        dump(
            CoachMessageOut(
                title=message.title,
                body=message.body,
                call_to_action=message.call_to_action,
                session_id=entry.id,
            )
        )
    )


@router.post("/chat")
async def chat(
    body: ChatRequest,
    session: AsyncSession = Depends(get_session),
    generator: CoachMessageGenerator = Depends(get_generator),
) -> dict:
    await load_user(session, body.user_id)
    try:
        reply = await generator.chat(body.message, body.context)
    except CoachGenerationError as exc:
        raise HTTPException(status_code=500, detail="Failed to get AI coach response") from exc
    return ok(reply)


@router.get("/suggestions/{user_id}")
async def suggestions(
    user_id: int, generator: CoachMessageGenerator = Depends(get_generator)
) -> dict:
    return ok(await generator.suggestions(user_id))


@router.get("/sessions/{user_id}")
async def session_history(
    user_id: int, session: AsyncSession = Depends(get_session)
) -> dict:
    entries = await list_sessions_for_user(session, user_id)
    return ok([dump(CoachSessionOut.model_validate(entry)) for entry in entries])


@router.get("/sessions/detail/{session_id}")
async def session_detail(
    session_id: int, session: AsyncSession = Depends(get_session)
) -> dict:
    entry = await get_coach_session(session, session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Coach session not found")
    return ok(dump(CoachSessionOut.model_validate(entry)))


@router.get("/streaks/{user_id}")
async def streaks(user_id: int, session: AsyncSession = Depends(get_session)) -> dict:
    entries = await list_streaks(session, user_id)
    return ok([dump(StreakOut.model_validate(entry)) for entry in entries])

from typing import Literal

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from coach.api.deps import get_session, load_user, require_admin
from coach.api.errors import ok
from coach.api.schemas import (
    PreferenceOut,
    PreferenceUpdateRequest,
    PushTokenRequest,
    dump,
)
from coach.repositories import notifications as notification_repo
from coach.scheduler import jobs


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("/preferences/{user_id}")
async def get_preferences(
    user_id: int, session: AsyncSession = Depends(get_session)
) -> dict:
    prefs = await notification_repo.list_preferences(session, user_id)
    return ok(
        {pref.reminder_type: dump(PreferenceOut.model_validate(pref)) for pref in prefs}
    )


@router.post("/preferences")
async def update_preferences(
    body: PreferenceUpdateRequest, session: AsyncSession = Depends(get_session)
) -> dict:
    await load_user(session, body.user_id)
    await notification_repo.upsert_preference(
        session,
        user_id=body.user_id,
        reminder_type=body.reminder_type,
        enabled=body.enabled,
        time_preference=body.time_preference,
    )
    await session.commit()
    return ok(message="Notification preferences updated")


@router.post("/push-token")
async def set_push_token(
    body: PushTokenRequest, session: AsyncSession = Depends(get_session)
) -> dict:
    await load_user(session, body.user_id)
    updated = await notification_repo.set_push_token(
        session, body.user_id, body.push_token
    )
    await session.commit()
    return ok({"updated": updated}, message="Push token updated")


@router.post("/admin/trigger/{kind}", dependencies=[Depends(require_admin)])
async def trigger_checkins(kind: Literal["daily", "weekly"], request: Request) -> dict:
    state = request.app.state
    if kind == "daily":
        summary = await jobs.send_daily_checkins(state.session_factory, state.generator)
    else:
        summary = await jobs.send_weekly_reflections(
            state.session_factory, state.generator
        )
    return ok(summary.as_dict())

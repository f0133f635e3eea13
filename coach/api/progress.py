from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from coach.api.deps import get_session, load_user
from coach.api.errors import ok
from coach.api.schemas import (
    ActivityLogRequest,
    ActivityOut,
    EngagementOut,
    ProgressOut,
    dump,
)
from coach.services import activity as activity_service


router = APIRouter(prefix="/api/progress", tags=["progress"])


@router.get("/{user_id}")
async def user_progress(
    user_id: int, session: AsyncSession = Depends(get_session)
) -> dict:
    progress = await activity_service.get_user_progress(session, user_id)
    out = ProgressOut(
        total_check_ins=progress.total_check_ins,
        days_active=progress.days_active,
        current_streak=progress.current_streak,
        longest_streak=progress.longest_streak,
        recent_activity=[
            ActivityOut.model_validate(entry) for entry in progress.recent_activity
        ],
        weekly_engagement=[
            EngagementOut(day=day, count=count)
            for day, count in progress.weekly_engagement
        ],
    )
    return ok(dump(out))


@router.post("/activity")
async def log_activity(
    body: ActivityLogRequest, session: AsyncSession = Depends(get_session)
) -> dict:
    await load_user(session, body.user_id)
    await activity_service.log_activity(
        session,
        user_id=body.user_id,
        action_type=body.action_type,
        value=body.value,
        details=body.details,
    )
    await session.commit()
    return ok(message="Activity logged successfully")


@router.get("/activity/{user_id}")
async def activity_log(
    user_id: int,
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate")
    entries = await activity_service.get_activity_range(
        session, user_id, start=start_date, end=end_date
    )
    return ok([dump(ActivityOut.model_validate(entry)) for entry in entries])

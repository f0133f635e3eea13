from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from coach.api.deps import get_session, load_user
from coach.api.errors import ok
from coach.api.schemas import UserCreateRequest, UserOut, dump
from coach.services.users import EmailAlreadyRegisteredError, register_user


router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", status_code=201)
async def create_user(
    body: UserCreateRequest, session: AsyncSession = Depends(get_session)
) -> dict:
    try:
        user = await register_user(
            session,
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
            relationship_status=body.relationship_status,
        )
    except EmailAlreadyRegisteredError as exc:
        raise HTTPException(status_code=409, detail="Email already registered") from exc
    await session.commit()
    await session.refresh(user)
    return ok(dump(UserOut.model_validate(user)))


@router.get("/{user_id}")
async def get_user(user_id: int, session: AsyncSession = Depends(get_session)) -> dict:
    user = await load_user(session, user_id)
    return ok(dump(UserOut.model_validate(user)))

import hmac

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from coach.ai.adapter import CoachMessageGenerator
from coach.billing.adapter import BillingProvider
from coach.db.models import User
from coach.repositories.users import get_user_by_id


async def get_session(request: Request):
    async with request.app.state.session_factory() as session:
        yield session


def get_generator(request: Request) -> CoachMessageGenerator:
    return request.app.state.generator


def get_billing(request: Request) -> BillingProvider:
    billing = request.app.state.billing
    if billing is None:
        raise HTTPException(status_code=503, detail="Billing is not configured")
    return billing


def require_admin(
    request: Request, x_admin_token: str | None = Header(default=None)
) -> None:
    expected = request.app.state.admin_token
    if not expected:
        raise HTTPException(status_code=403, detail="Admin API is disabled")
    if not x_admin_token or not hmac.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=403, detail="Invalid admin token")


async def load_user(session: AsyncSession, user_id: int) -> User:
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user

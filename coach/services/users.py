from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import Tier, User
from coach.repositories import users as user_repo
from coach.repositories.audit_log import add_audit_log


class EmailAlreadyRegisteredError(Exception):
    pass


async def register_user(
    session: AsyncSession,
    email: str,
    first_name: str,
    last_name: str | None = None,
    relationship_status: str | None = None,
) -> User:
    email = email.strip().lower()
    if await user_repo.get_user_by_email(session, email) is not None:
        raise EmailAlreadyRegisteredError(email)
    user = await user_repo.add_user(
        session,
        email=email,
        first_name=first_name,
        last_name=last_name,
        relationship_status=relationship_status,
        subscription_tier=Tier.FREE,
    )
    await session.flush()
    await add_audit_log(session, "user_registered", {"user_id": user.id})
    return user

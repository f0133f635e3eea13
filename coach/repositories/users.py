from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import User


async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.lower())
    )
    return result.scalar_one_or_none()


async def list_users_with_tiers(
    session: AsyncSession, tiers: tuple[str, ...]
) -> list[User]:
    result = await session.execute(
        select(User).where(User.subscription_tier.in_(tiers)).order_by(User.id)
    )
    return list(result.scalars().all())


async def set_subscription_tier(session: AsyncSession, user: User, tier: str) -> None:
    user.subscription_tier = tier


async def add_user(
    session: AsyncSession,
    email: str,
    first_name: str,
    last_name: str | None,
    relationship_status: str | None,
    subscription_tier: str,
) -> User:
    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        relationship_status=relationship_status,
        subscription_tier=subscription_tier,
    )
    session.add(user)
    return user

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import StripeSubscription, SubscriptionStatus


async def get_subscription_by_user(
    session: AsyncSession, user_id: int
) -> StripeSubscription | None:
    result = await session.execute(
        select(StripeSubscription)
        .where(StripeSubscription.user_id == user_id)
        .order_by(StripeSubscription.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_subscription_by_customer(
    session: AsyncSession, customer_id: str
) -> StripeSubscription | None:
    result = await session.execute(
        select(StripeSubscription).where(
            StripeSubscription.stripe_customer_id == customer_id
        )
    )
    return result.scalar_one_or_none()


async def add_pending_subscription(
    session: AsyncSession, user_id: int, customer_id: str, plan_type: str
) -> StripeSubscription:
    entry = StripeSubscription(
        user_id=user_id,
        stripe_customer_id=customer_id,
        plan_type=plan_type,
        status=SubscriptionStatus.PENDING,
    )
    session.add(entry)
    return entry

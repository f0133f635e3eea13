from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import Tier, User
from coach.services import tiers
from coach.services.promos import PromoAccess, check_user_promo_access


@dataclass(frozen=True)
class Entitlement:
    subscription_tier: str
    promo_access: PromoAccess
    effective_tier: str
    tier_name: str
    is_premium: bool
    has_access: bool | None = None
    upgrade_message: str | None = None


async def get_entitlement(
    session: AsyncSession,
    user: User,
    required_tier: str | None = None,
    now: datetime | None = None,
) -> Entitlement:
    """Combine the paid tier and any live promo grant for ``user``.

    The two grants are independent; whichever ranks higher decides what the
    user may open. ``has_access`` is only filled when ``required_tier`` is given,
    and ``upgrade_message`` only when that tier is locked.
    """
    promo_access = await check_user_promo_access(session, user.id, now=now)
    subscription_tier = (
        user.subscription_tier
        if tiers.is_valid_tier(user.subscription_tier)
        else Tier.FREE
    )
    effective = tiers.max_tier(subscription_tier, promo_access.plan_type)

    has_access = None
    upgrade_message = None
    if required_tier is not None:
        has_access = not tiers.is_content_locked(
            required_tier, subscription_tier, promo_access.plan_type
        )
        if not has_access:
            upgrade_message = tiers.upgrade_message(required_tier)

    return Entitlement(
        subscription_tier=subscription_tier,
        promo_access=promo_access,
        effective_tier=effective,
        tier_name=tiers.tier_display_name(effective),
        is_premium=tiers.is_premium(subscription_tier, promo_access.plan_type),
        has_access=has_access,
        upgrade_message=upgrade_message,
    )

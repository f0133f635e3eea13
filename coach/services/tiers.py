from coach.db.models import Tier


TIER_ORDER: tuple[str, ...] = (Tier.FREE, Tier.PLUS, Tier.PRO, Tier.PRO_MAX)
TIER_RANK: dict[str, int] = {tier: rank for rank, tier in enumerate(TIER_ORDER)}

_DISPLAY_NAMES = {
    Tier.FREE: "Free",
    Tier.PLUS: "Plus",
    Tier.PRO: "Pro",
    Tier.PRO_MAX: "Pro Max",
}

_UPGRADE_MESSAGES = {
    Tier.FREE: "Sign up to access this feature",
    Tier.PLUS: "Upgrade to Plus to access",
    Tier.PRO: "Upgrade to Pro to access",
    Tier.PRO_MAX: "Upgrade to Pro Max to access",
}


def is_valid_tier(value: str | None) -> bool:
    return value in TIER_RANK


def has_access(user_tier: str, required_tier: str) -> bool:
    return TIER_RANK[user_tier] >= TIER_RANK[required_tier]


def max_tier(*tiers: str | None) -> str:
    known = [tier for tier in tiers if is_valid_tier(tier)]
    if not known:
        return Tier.FREE
    return max(known, key=TIER_RANK.__getitem__)


def is_premium(user_tier: str, promo_plan: str | None = None) -> bool:
    if promo_plan is not None:
        return True
    return user_tier != Tier.FREE


def is_content_locked(
    required_tier: str, user_tier: str, promo_plan: str | None = None
) -> bool:
    return not has_access(max_tier(user_tier, promo_plan), required_tier)


def tier_display_name(tier: str) -> str:
    return _DISPLAY_NAMES[tier]


def upgrade_message(required_tier: str) -> str:
    return _UPGRADE_MESSAGES.get(
        required_tier, "This feature requires a premium subscription"
    )

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import PromoCode, PromoRedemption, ensure_utc
from coach.repositories import promos as promo_repo
from coach.repositories.audit_log import add_audit_log


logger = logging.getLogger(__name__)

# Redemptions always grant one calendar month, whatever the code says.
GRANT_MONTHS = 1

MSG_NOT_FOUND = "Promo code not found or inactive"
MSG_EXPIRED = "Promo code has expired"
MSG_MAX_USES = "Promo code has reached maximum uses"
MSG_ACCESS_EXPIRED = "Your promo access has expired"
MSG_ALREADY_REDEEMED = "Already redeemed"


@dataclass(frozen=True)
class PromoValidation:
    valid: bool
    message: str
    plan_type: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class PromoAccess:
    has_access: bool
    plan_type: str | None = None
    expires_at: datetime | None = None


class DuplicatePromoCodeError(Exception):
    pass


def add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def is_expired(expires_at: datetime | None, now: datetime) -> bool:
    return expires_at is not None and ensure_utc(expires_at) <= now


def _already_redeemed(redemption: PromoRedemption, now: datetime) -> PromoValidation:
    if is_expired(redemption.expires_at, now):
        return PromoValidation(valid=False, message=MSG_ACCESS_EXPIRED)
    return PromoValidation(
        valid=True,
        message=MSG_ALREADY_REDEEMED,
        plan_type=redemption.plan_type,
        expires_at=ensure_utc(redemption.expires_at),
    )


async def validate_promo_code(
    session: AsyncSession, code: str, user_id: int, now: datetime | None = None
) -> PromoValidation:
    # The caller commits; both writes below land in one transaction.
    now = now or datetime.now(timezone.utc)

    promo = await promo_repo.get_active_promo_by_code(session, code)
    if promo is None:
        return PromoValidation(valid=False, message=MSG_NOT_FOUND)
    if is_expired(promo.expires_at, now):
        return PromoValidation(valid=False, message=MSG_EXPIRED)
    if promo.max_uses is not None and promo.current_uses >= promo.max_uses:
        return PromoValidation(valid=False, message=MSG_MAX_USES)

    redemption = await promo_repo.get_redemption(session, user_id, promo.id)
    if redemption is not None:
        return _already_redeemed(redemption, now)

    promo_id = promo.id
    plan_type = promo.plan_type
    expires_at = add_months(now, GRANT_MONTHS)

    try:
        # A lost race rolls back to this savepoint only.
        async with session.begin_nested():
            if not await promo_repo.increment_uses_if_available(session, promo_id):
                return PromoValidation(valid=False, message=MSG_MAX_USES)
            await promo_repo.add_redemption(
                session,
                user_id=user_id,
                promo_code_id=promo_id,
                plan_type=plan_type,
                redeemed_at=now,
                expires_at=expires_at,
            )
            await session.flush()
    except IntegrityError:
        # A concurrent request redeemed the same code for this user first.
        redemption = await promo_repo.get_redemption(session, user_id, promo_id)
        if redemption is None:
            raise
        return _already_redeemed(redemption, now)

    logger.info(
        "Promo code redeemed",
        extra={"user_id": user_id, "promo_code_id": promo_id, "plan_type": plan_type},
    )
    return PromoValidation(
        valid=True,
        message=f"Successfully redeemed! Plan: {plan_type}",
        plan_type=plan_type,
        expires_at=expires_at,
    )


async def check_user_promo_access(
    session: AsyncSession, user_id: int, now: datetime | None = None
) -> PromoAccess:
    now = now or datetime.now(timezone.utc)
    redemption = await promo_repo.get_latest_active_redemption(session, user_id, now)
    if redemption is None:
        return PromoAccess(has_access=False)
    return PromoAccess(
        has_access=True,
        plan_type=redemption.plan_type,
        expires_at=ensure_utc(redemption.expires_at),
    )


async def create_promo_code(
    session: AsyncSession,
    code: str,
    plan_type: str,
    description: str | None = None,
    max_uses: int | None = None,
    expires_at: datetime | None = None,
) -> PromoCode:
    if await promo_repo.get_promo_by_code(session, code) is not None:
        raise DuplicatePromoCodeError(code.strip().upper())
    promo = await promo_repo.create_promo_code(
        session,
        code=code,
        plan_type=plan_type,
        description=description,
        max_uses=max_uses,
        expires_at=expires_at,
    )
    await session.flush()
    await add_audit_log(
        session,
        "promo_created",
        {"promo_code_id": promo.id, "code": promo.code, "plan_type": plan_type},
    )
    return promo


async def delete_promo_code(session: AsyncSession, promo_id: int) -> bool:
    promo = await promo_repo.get_promo_by_id(session, promo_id)
    if promo is None:
        return False
    await add_audit_log(
        session, "promo_deleted", {"promo_code_id": promo.id, "code": promo.code}
    )
    await promo_repo.delete_promo(session, promo)
    return True

from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coach.db.models import PromoCode, PromoRedemption


async def get_promo_by_code(session: AsyncSession, code: str) -> PromoCode | None:
    result = await session.execute(
        select(PromoCode).where(PromoCode.code == code.strip().upper())
    )
    return result.scalar_one_or_none()


async def get_active_promo_by_code(
    session: AsyncSession, code: str
) -> PromoCode | None:
    result = await session.execute(
        select(PromoCode)
        .where(PromoCode.code == code.strip().upper())
        .where(PromoCode.is_active.is_(True))
    )
    return result.scalar_one_or_none()


async def get_promo_by_id(session: AsyncSession, promo_id: int) -> PromoCode | None:
    result = await session.execute(select(PromoCode).where(PromoCode.id == promo_id))
    return result.scalar_one_or_none()


async def create_promo_code(
    session: AsyncSession,
    code: str,
    plan_type: str,
    description: str | None,
    max_uses: int | None,
    expires_at: datetime | None,
) -> PromoCode:
    promo = PromoCode(
        code=code.strip().upper(),
        plan_type=plan_type,
        description=description,
        max_uses=max_uses,
        expires_at=expires_at,
        current_uses=0,
        is_active=True,
    )
    session.add(promo)
    return promo


async def list_promos(session: AsyncSession) -> list[PromoCode]:
    result = await session.execute(
        select(PromoCode).order_by(PromoCode.created_at.desc(), PromoCode.id.desc())
    )
    return list(result.scalars().all())


async def delete_promo(session: AsyncSession, promo: PromoCode) -> None:
    await session.execute(
        delete(PromoRedemption).where(PromoRedemption.promo_code_id == promo.id)
    )
    await session.delete(promo)


async def increment_uses_if_available(session: AsyncSession, promo_id: int) -> bool:
    """Bump ``current_uses`` unless the cap is already reached.

    The cap check and the increment are one statement, so two concurrent
    redemptions of the last slot cannot both succeed.
    """
    result = await session.execute(
        update(PromoCode)
        .where(PromoCode.id == promo_id)
        .where(
            or_(
                PromoCode.max_uses.is_(None),
                PromoCode.current_uses < PromoCode.max_uses,
            )
        )
        .values(current_uses=PromoCode.current_uses + 1)
    )
    return result.rowcount == 1


async def get_redemption(
    session: AsyncSession, user_id: int, promo_code_id: int
) -> PromoRedemption | None:
    result = await session.execute(
        select(PromoRedemption).where(
            PromoRedemption.user_id == user_id,
            PromoRedemption.promo_code_id == promo_code_id,
        )
    )
    return result.scalar_one_or_none()


async def add_redemption(
    session: AsyncSession,
    user_id: int,
    promo_code_id: int,
    plan_type: str,
    redeemed_at: datetime,
    expires_at: datetime | None,
) -> PromoRedemption:
    redemption = PromoRedemption(
        user_id=user_id,
        promo_code_id=promo_code_id,
        plan_type=plan_type,
        redeemed_at=redeemed_at,
        expires_at=expires_at,
    )
    session.add(redemption)
    return redemption


async def get_latest_active_redemption(
    session: AsyncSession, user_id: int, now: datetime
) -> PromoRedemption | None:
    result = await session.execute(
        select(PromoRedemption)
        .where(PromoRedemption.user_id == user_id)
        .where(
            or_(
                PromoRedemption.expires_at.is_(None),
                PromoRedemption.expires_at > now,
            )
        )
        .order_by(PromoRedemption.redeemed_at.desc(), PromoRedemption.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()

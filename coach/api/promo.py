import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from coach.api.deps import get_session, load_user, require_admin
from coach.api.errors import ok
from coach.api.schemas import (
    PromoAccessOut,
    PromoCodeOut,
    PromoCreateRequest,
    PromoValidateRequest,
    PromoValidationOut,
    dump,
)
from coach.repositories.promos import list_promos
from coach.services import promos as promo_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/promo", tags=["promo"])


async def _validate(body: PromoValidateRequest, session: AsyncSession) -> dict:
    await load_user(session, body.user_id)
    result = await promo_service.validate_promo_code(session, body.code, body.user_id)
    await session.commit()
    return ok(dump(PromoValidationOut.model_validate(result), exclude_none=True))


@router.post("/validate")
async def validate_promo(
    body: PromoValidateRequest, session: AsyncSession = Depends(get_session)
) -> dict:
    return await _validate(body, session)


@router.post("/redeem")
async def redeem_promo(
    body: PromoValidateRequest, session: AsyncSession = Depends(get_session)
) -> dict:
    return await _validate(body, session)


@router.get("/check/{user_id}")
async def check_promo_access(
    user_id: int, session: AsyncSession = Depends(get_session)
) -> dict:
    access = await promo_service.check_user_promo_access(session, user_id)
    return ok(dump(PromoAccessOut.model_validate(access), exclude_none=True))


@router.post("/admin/promo", dependencies=[Depends(require_admin)])
async def create_promo(
    body: PromoCreateRequest, session: AsyncSession = Depends(get_session)
) -> dict:
    try:
        promo = await promo_service.create_promo_code(
            session,
            code=body.code,
            plan_type=body.plan_type,
            description=body.description,
            max_uses=body.max_uses,
            expires_at=body.expires_at,
        )
    except promo_service.DuplicatePromoCodeError as exc:
        raise HTTPException(
            status_code=409, detail=f"Promo code {exc} already exists"
        ) from exc
    await session.commit()
    await session.refresh(promo)
    logger.info("Promo code created", extra={"code": promo.code})
    return ok(dump(PromoCodeOut.model_validate(promo)))


@router.get("", dependencies=[Depends(require_admin)])
async def list_promo_codes(session: AsyncSession = Depends(get_session)) -> dict:
    promos = await list_promos(session)
    return ok([dump(PromoCodeOut.model_validate(promo)) for promo in promos])


@router.delete("/{promo_id}", dependencies=[Depends(require_admin)])
async def delete_promo(
    promo_id: int, session: AsyncSession = Depends(get_session)
) -> dict:
    if not await promo_service.delete_promo_code(session, promo_id):
        raise HTTPException(status_code=404, detail="Promo code not found")
    await session.commit()
    return ok(message="Promo code deleted")

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from coach.api.deps import get_billing, get_session, load_user
from coach.api.errors import ok
from coach.api.schemas import (
    CheckoutOut,
    CheckoutRequest,
    EntitlementOut,
    TierName,
    dump,
)
from coach.billing.adapter import BillingError, BillingProvider, WebhookSignatureError
from coach.services.entitlements import get_entitlement
from coach.services.subscriptions import apply_billing_event, create_checkout


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


@router.post("/create-session")
async def create_session(
    body: CheckoutRequest,
    session: AsyncSession = Depends(get_session),
    billing: BillingProvider = Depends(get_billing),
) -> dict:
    user = await load_user(session, body.user_id)
    try:
        checkout = await create_checkout(
            session,
            billing,
            user=user,
            price_id=body.price_id,
            plan_type=body.plan_type,
            success_url=body.success_url,
            cancel_url=body.cancel_url,
        )
    except BillingError as exc:
        logger.exception("Checkout session failed", extra={"user_id": body.user_id})
        raise HTTPException(
            status_code=500, detail="Failed to create checkout session"
        ) from exc
    await session.commit()
    return ok(
        dump(CheckoutOut(session_id=checkout.session_id, url=checkout.url))
    )


@router.post("/webhook")
async def webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session),
    billing: BillingProvider = Depends(get_billing),
) -> dict:
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="No signature")

    payload = await request.body()
    try:
        event = billing.parse_webhook(payload, stripe_signature)
    except WebhookSignatureError as exc:
        logger.warning("Rejected billing webhook", extra={"error": str(exc)})
        raise HTTPException(status_code=400, detail="Webhook processing failed") from exc

    changed = await apply_billing_event(session, event)
    await session.commit()
    logger.info(
        "Billing webhook processed",
        extra={"event_id": event.id, "event_type": event.type, "changed": changed},
    )
    return ok({"received": True})


@router.get("/access/{user_id}")
async def access(
    user_id: int,
    required_tier: Optional[TierName] = Query(default=None, alias="requiredTier"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    user = await load_user(session, user_id)
    entitlement = await get_entitlement(session, user, required_tier=required_tier)
    return ok(dump(EntitlementOut.model_validate(entitlement)))

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from coach.billing.adapter import BillingEvent, BillingProvider, CheckoutSession
from coach.db.models import StripeSubscription, SubscriptionStatus, Tier, User
from coach.repositories import subscriptions as subscription_repo
from coach.repositories import users as user_repo
from coach.services.tiers import is_valid_tier


logger = logging.getLogger(__name__)

UPDATE_EVENTS = {
    "customer.subscription.created",
    "customer.subscription.updated",
    "invoice.payment_succeeded",
}
DELETE_EVENT = "customer.subscription.deleted"
PAYMENT_FAILED_EVENT = "invoice.payment_failed"


def _from_timestamp(value) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _first_price_id(obj: dict) -> str | None:
    items = (obj.get("items") or {}).get("data") or []
    if items:
        return (items[0].get("price") or {}).get("id")
    lines = (obj.get("lines") or {}).get("data") or []
    if lines:
        return (lines[0].get("price") or {}).get("id")
    return None


async def create_checkout(
    session: AsyncSession,
    billing: BillingProvider,
    user: User,
    price_id: str,
    plan_type: str,
    success_url: str,
    cancel_url: str,
) -> CheckoutSession:
    # Commit is left to the caller.
    subscription = await subscription_repo.get_subscription_by_user(session, user.id)
    if subscription is None:
        customer_id = await billing.create_customer(user.id, user.email, user.first_name)
        await subscription_repo.add_pending_subscription(
            session, user.id, customer_id, plan_type
        )
    else:
        customer_id = subscription.stripe_customer_id

    return await billing.create_checkout_session(
        customer_id=customer_id,
        price_id=price_id,
        success_url=success_url,
        cancel_url=cancel_url,
        metadata={"userId": str(user.id), "planType": plan_type},
    )


async def _resolve_target(
    session: AsyncSession, event: BillingEvent
) -> tuple[User | None, StripeSubscription | None]:
    customer_id = event.object.get("customer")
    subscription = None
    if customer_id:
        subscription = await subscription_repo.get_subscription_by_customer(
            session, customer_id
        )

    raw_user_id = event.metadata.get("userId")
    user_id = None
    if raw_user_id is not None:
        try:
            user_id = int(raw_user_id)
        except (TypeError, ValueError):
            logger.warning(
                "Billing event has a malformed userId",
                extra={"event_id": event.id, "user_id": raw_user_id},
            )
    if user_id is None and subscription is not None:
        user_id = subscription.user_id
    if user_id is None:
        return None, subscription

    user = await user_repo.get_user_by_id(session, user_id)
    if subscription is None and user is not None:
        subscription = await subscription_repo.get_subscription_by_user(session, user.id)
    return user, subscription


async def _apply_update(
    session: AsyncSession,
    event: BillingEvent,
    user: User,
    subscription: StripeSubscription | None,
) -> None:
    obj = event.object
    plan_type = event.metadata.get("planType") or Tier.PLUS
    if not is_valid_tier(plan_type):
        logger.warning(
            "Billing event names an unknown plan, granting plus",
            extra={"event_id": event.id, "plan_type": plan_type},
        )
        plan_type = Tier.PLUS

    is_invoice = event.type.startswith("invoice.")
    subscription_id = obj.get("subscription") if is_invoice else obj.get("id")
    status = SubscriptionStatus.ACTIVE if is_invoice else obj.get("status")

    if subscription is None:
        customer_id = obj.get("customer")
        if not customer_id:
            logger.warning(
                "Billing event has no customer, skipping",
                extra={"event_id": event.id},
            )
            return
        subscription = await subscription_repo.add_pending_subscription(
            session, user.id, customer_id, plan_type
        )

    subscription.plan_type = plan_type
    subscription.status = status or subscription.status
    if subscription_id:
        subscription.stripe_subscription_id = subscription_id
    subscription.stripe_price_id = _first_price_id(obj) or subscription.stripe_price_id
    if not is_invoice:
        subscription.current_period_start = _from_timestamp(
            obj.get("current_period_start")
        )
        subscription.current_period_end = _from_timestamp(obj.get("current_period_end"))

    await user_repo.set_subscription_tier(session, user, plan_type)


async def apply_billing_event(session: AsyncSession, event: BillingEvent) -> bool:
    """Apply a verified provider event to the stored subscription and tier.

    Returns False when the event was acknowledged without any change.
    Commit is left to the caller.
    """
    if event.type not in UPDATE_EVENTS | {DELETE_EVENT, PAYMENT_FAILED_EVENT}:
        logger.info("Unhandled billing event", extra={"event_type": event.type})
        return False

    user, subscription = await _resolve_target(session, event)
    if user is None:
        logger.warning(
            "Billing event does not map to a user",
            extra={"event_id": event.id, "event_type": event.type},
        )
        return False

    if event.type == PAYMENT_FAILED_EVENT:
        logger.warning(
            "Payment failed",
            extra={"event_id": event.id, "user_id": user.id},
        )
        return False

    if event.type == DELETE_EVENT:
        if subscription is not None:
            subscription.status = SubscriptionStatus.CANCELLED
        await user_repo.set_subscription_tier(session, user, Tier.FREE)
        return True

    await _apply_update(session, event, user, subscription)
    return True

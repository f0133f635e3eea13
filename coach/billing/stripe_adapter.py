import asyncio
import json
import logging

import stripe

from coach.billing.adapter import (
    BillingError,
    BillingEvent,
    BillingProvider,
    CheckoutSession,
    WebhookSignatureError,
)


logger = logging.getLogger(__name__)


class StripeBillingProvider(BillingProvider):
    def __init__(self, secret_key: str, webhook_secret: str) -> None:
        if not secret_key or not webhook_secret:
            raise BillingError("Stripe keys are not configured")
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret

    async def create_customer(
        self, user_id: int, email: str, name: str | None
    ) -> str:
        try:
            customer = await asyncio.to_thread(
                stripe.Customer.create,
                api_key=self._secret_key,
                email=email,
                name=name,
                metadata={"userId": str(user_id)},
            )
        except stripe.StripeError as exc:
            raise BillingError(f"Stripe customer creation failed: {exc}") from exc
        return customer.id

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict,
    ) -> CheckoutSession:
        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                api_key=self._secret_key,
                customer=customer_id,
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                mode="subscription",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                subscription_data={"metadata": metadata},
            )
        except stripe.StripeError as exc:
            raise BillingError(f"Stripe checkout session creation failed: {exc}") from exc
        return CheckoutSession(session_id=session.id, url=session.url)

    def parse_webhook(self, payload: bytes, signature: str) -> BillingEvent:
        try:
            stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except ValueError as exc:
            raise WebhookSignatureError(f"Invalid payload: {exc}") from exc
        except stripe.SignatureVerificationError as exc:
            raise WebhookSignatureError(f"Invalid signature: {exc}") from exc

        # Signature is verified; read the plain JSON rather than StripeObject.
        event = json.loads(payload)
        return BillingEvent(
            id=event.get("id", ""),
            type=event.get("type", ""),
            object=(event.get("data") or {}).get("object") or {},
        )

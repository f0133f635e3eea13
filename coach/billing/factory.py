import logging

from coach.billing.adapter import BillingProvider
from coach.billing.stripe_adapter import StripeBillingProvider
from config import Settings


logger = logging.getLogger(__name__)


def build_billing_provider(settings: Settings) -> BillingProvider | None:
    if not settings.billing_configured:
        logger.warning("Stripe keys are not set, billing endpoints are disabled")
        return None
    return StripeBillingProvider(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
    )

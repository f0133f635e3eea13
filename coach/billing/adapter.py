from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class BillingError(Exception):
    pass


class WebhookSignatureError(BillingError):
    pass


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


@dataclass(frozen=True)
class BillingEvent:
    id: str
    type: str
    object: dict = field(default_factory=dict)

    @property
    def metadata(self) -> dict:
        metadata = self.object.get("metadata") or {}
        if metadata:
            return metadata
        # Invoices carry the subscription's metadata one level down.
        details = self.object.get("subscription_details") or {}
        return details.get("metadata") or {}


class BillingProvider(ABC):
    @abstractmethod
    async def create_customer(
        self, user_id: int, email: str, name: str | None
    ) -> str:
        """
        Returns the provider's customer id.
        """
        raise NotImplementedError

    @abstractmethod
    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict,
    ) -> CheckoutSession:
        raise NotImplementedError

    @abstractmethod
    def parse_webhook(self, payload: bytes, signature: str) -> BillingEvent:
        raise NotImplementedError

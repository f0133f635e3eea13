import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from coach.ai.template_adapter import TemplateCoachGenerator
from coach.api.app import create_app
from coach.billing.adapter import (
    BillingEvent,
    BillingProvider,
    CheckoutSession,
    WebhookSignatureError,
)
from coach.db import models  # noqa: F401
from coach.db.base import Base
from coach.db.models import PromoCode, User


ADMIN_TOKEN = "test-token"


class FakeBilling(BillingProvider):
    """In-memory billing provider; the signature must equal ``valid-signature``."""

    def __init__(self):
        self.customers: list[dict] = []
        self.checkouts: list[dict] = []

    async def create_customer(self, user_id, email, name):
        customer_id = f"cus_{user_id}_{len(self.customers) + 1}"
        self.customers.append({"id": customer_id, "user_id": user_id, "email": email})
        return customer_id

    async def create_checkout_session(
        self, customer_id, price_id, success_url, cancel_url, metadata
    ):
        self.checkouts.append(
            {"customer_id": customer_id, "price_id": price_id, "metadata": metadata}
        )
        return CheckoutSession(
            session_id=f"cs_{len(self.checkouts)}",
            url=f"https://checkout.test/{len(self.checkouts)}",
        )

    def parse_webhook(self, payload, signature):
        if signature != "valid-signature":
            raise WebhookSignatureError("bad signature")
        event = json.loads(payload)
        return BillingEvent(
            id=event["id"], type=event["type"], object=event["data"]["object"]
        )


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    async def _make_user(tier: str = "free", first_name: str | None = "Alex", **kwargs):
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            first_name=first_name,
            subscription_tier=tier,
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_promo(db_session):
    async def _make_promo(code: str = "TEST2024", plan_type: str = "pro", **kwargs):
        promo = PromoCode(code=code, plan_type=plan_type, **kwargs)
        db_session.add(promo)
        await db_session.commit()
        return promo

    return _make_promo


@pytest.fixture
def billing():
    return FakeBilling()


@pytest.fixture
def app(session_factory, billing):
    return create_app(
        TemplateCoachGenerator(),
        billing=billing,
        session_factory=session_factory,
        admin_token=ADMIN_TOKEN,
    )


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN}

from sqlalchemy import select

from coach.billing.adapter import BillingEvent
from coach.db.models import StripeSubscription
from coach.services.subscriptions import apply_billing_event, create_checkout


def _subscription_event(event_type, user_id, customer="cus_1", plan="pro", status="active"):
    return BillingEvent(
        id="evt_1",
        type=event_type,
        object={
            "id": "sub_1",
            "customer": customer,
            "status": status,
            "metadata": {"userId": str(user_id), "planType": plan},
            "items": {"data": [{"price": {"id": "price_pro"}}]},
            "current_period_start": 1714521600,
            "current_period_end": 1717200000,
        },
    )


async def test_checkout_reuses_the_stored_customer(db_session, billing, make_user):
    user = await make_user()

    first = await create_checkout(
        db_session, billing, user, "price_plus", "plus", "https://ok", "https://cancel"
    )
    await db_session.commit()
    second = await create_checkout(
        db_session, billing, user, "price_pro", "pro", "https://ok", "https://cancel"
    )

    assert first.session_id == "cs_1"
    assert second.url == "https://checkout.test/2"
    assert len(billing.customers) == 1
    assert billing.checkouts[1]["customer_id"] == billing.customers[0]["id"]
    assert billing.checkouts[1]["metadata"] == {"userId": str(user.id), "planType": "pro"}
    row = (await db_session.execute(select(StripeSubscription))).scalar_one()
    assert row.status == "pending"


async def test_subscription_update_sets_tier(db_session, make_user):
    user = await make_user()

    changed = await apply_billing_event(
        db_session, _subscription_event("customer.subscription.created", user.id)
    )
    await db_session.commit()

    assert changed
    assert user.subscription_tier == "pro"
    row = (await db_session.execute(select(StripeSubscription))).scalar_one()
    assert row.stripe_subscription_id == "sub_1"
    assert row.stripe_price_id == "price_pro"
    assert row.status == "active"
    assert row.current_period_end is not None


async def test_missing_plan_defaults_to_plus(db_session, make_user):
    user = await make_user()
    event = _subscription_event("customer.subscription.updated", user.id)
    del event.object["metadata"]["planType"]

    await apply_billing_event(db_session, event)

    assert user.subscription_tier == "plus"


async def test_deleted_subscription_drops_to_free(db_session, make_user):
    user = await make_user()
    await apply_billing_event(
        db_session, _subscription_event("customer.subscription.created", user.id)
    )
    await db_session.commit()

    changed = await apply_billing_event(
        db_session, _subscription_event("customer.subscription.deleted", user.id)
    )
    await db_session.commit()

    assert changed
    assert user.subscription_tier == "free"
    row = (await db_session.execute(select(StripeSubscription))).scalar_one()
    assert row.status == "cancelled"


async def test_invoice_resolves_user_through_customer(db_session, make_user):
    user = await make_user()
    await apply_billing_event(
        db_session, _subscription_event("customer.subscription.created", user.id, plan="plus")
    )
    await db_session.commit()

    invoice = BillingEvent(
        id="evt_2",
        type="invoice.payment_succeeded",
        object={"customer": "cus_1", "subscription": "sub_1"},
    )
    assert await apply_billing_event(db_session, invoice)
    assert user.subscription_tier == "plus"


async def test_ignored_events_change_nothing(db_session, make_user):
    user = await make_user("pro")

    failed = BillingEvent(
        id="evt_3",
        type="invoice.payment_failed",
        object={"customer": "cus_9", "metadata": {"userId": str(user.id)}},
    )
    unknown = BillingEvent(id="evt_4", type="charge.refunded", object={})
    orphan = _subscription_event("customer.subscription.updated", 424242)

    assert not await apply_billing_event(db_session, failed)
    assert not await apply_billing_event(db_session, unknown)
    assert not await apply_billing_event(db_session, orphan)
    assert user.subscription_tier == "pro"

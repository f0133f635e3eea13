import json

import httpx
import pytest

from coach.ai.template_adapter import TemplateCoachGenerator
from coach.api.app import create_app


async def test_health_reports_collaborators(client):
    response = await client.get("/api/health")

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["billing"] is True
    assert body["data"]["aiProvider"] == "template"


async def test_validate_and_check_promo(client, make_user, make_promo):
    user = await make_user()
    await make_promo("TEST2024", plan_type="pro")

    response = await client.post(
        "/api/promo/validate", json={"code": "test2024", "userId": user.id}
    )
    data = response.json()["data"]
    assert response.status_code == 200
    assert data["valid"] is True
    assert data["planType"] == "pro"
    assert data["message"] == "Successfully redeemed! Plan: pro"
    assert "expiresAt" in data

    again = await client.post("/api/promo/redeem", json={"code": "TEST2024", "userId": user.id})
    assert again.json()["data"]["message"] == "Already redeemed"

    check = await client.get(f"/api/promo/check/{user.id}")
    assert check.json()["data"]["hasAccess"] is True
    assert check.json()["data"]["planType"] == "pro"


async def test_invalid_promo_omits_plan(client, make_user):
    user = await make_user()

    response = await client.post("/api/promo/validate", json={"code": "NOPE", "userId": user.id})

    assert response.status_code == 200
    assert response.json()["data"] == {
        "valid": False,
        "message": "Promo code not found or inactive",
    }


async def test_validation_errors_use_the_envelope(client):
    response = await client.post("/api/promo/validate", json={"code": ""})

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert {detail["field"] for detail in body["details"]} == {"code", "userId"}


async def test_unknown_user_is_404(client):
    response = await client.post("/api/promo/validate", json={"code": "X", "userId": 77})

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "User not found"}


async def test_admin_routes_require_token(client, admin_headers):
    payload = {"code": "launch", "planType": "plus", "maxUses": 5}

    denied = await client.post("/api/promo/admin/promo", json=payload)
    assert denied.status_code == 403

    created = await client.post("/api/promo/admin/promo", json=payload, headers=admin_headers)
    assert created.status_code == 200
    promo = created.json()["data"]
    assert promo["code"] == "LAUNCH"
    assert promo["currentUses"] == 0

    duplicate = await client.post("/api/promo/admin/promo", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409

    listed = await client.get("/api/promo", headers=admin_headers)
    assert [item["code"] for item in listed.json()["data"]] == ["LAUNCH"]

    deleted = await client.delete(f"/api/promo/{promo['id']}", headers=admin_headers)
    assert deleted.json()["message"] == "Promo code deleted"
    missing = await client.delete(f"/api/promo/{promo['id']}", headers=admin_headers)
    assert missing.status_code == 404


async def test_admin_api_disabled_without_token(session_factory):
    app = create_app(TemplateCoachGenerator(), session_factory=session_factory, admin_token="")
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/promo", headers={"X-Admin-Token": "anything"})

    assert response.status_code == 403
    assert response.json()["error"] == "Admin API is disabled"


async def test_coach_session_flow(client, make_user):
    user = await make_user(first_name="Rae")

    created = await client.post("/api/ai-coach", json={"userId": user.id, "mood": "tired"})
    data = created.json()["data"]
    assert created.status_code == 200
    assert data["title"] == "Small Moments Matter"
    assert data["callToAction"]

    history = await client.get(f"/api/ai-coach/sessions/{user.id}")
    sessions = history.json()["data"]
    assert [item["id"] for item in sessions] == [data["sessionId"]]
    assert sessions[0]["userContext"]["mood"] == "tired"

    detail = await client.get(f"/api/ai-coach/sessions/detail/{data['sessionId']}")
    assert detail.json()["data"]["sessionType"] == "manual"
    assert (await client.get("/api/ai-coach/sessions/detail/999")).status_code == 404


async def test_chat_and_suggestions(client, make_user):
    user = await make_user()

    chat = await client.post("/api/ai-coach/chat", json={"message": "Hi", "userId": user.id})
    suggestions = await client.get(f"/api/ai-coach/suggestions/{user.id}")

    assert isinstance(chat.json()["data"], str)
    assert len(suggestions.json()["data"]) == 3


async def test_entitlement_endpoint(client, make_user):
    user = await make_user("plus")

    response = await client.get(f"/api/subscriptions/access/{user.id}?requiredTier=pro")

    data = response.json()["data"]
    assert data["effectiveTier"] == "plus"
    assert data["hasAccess"] is False
    assert data["promoAccess"] == {"hasAccess": False, "planType": None, "expiresAt": None}
    assert data["tierName"] == "Plus"
    assert data["isPremium"] is True
    assert data["upgradeMessage"] == "Upgrade to Pro to access"


async def test_checkout_session(client, billing, make_user):
    user = await make_user()

    response = await client.post(
        "/api/subscriptions/create-session",
        json={
            "userId": user.id,
            "priceId": "price_plus",
            "planType": "plus",
            "successUrl": "https://app.test/ok",
            "cancelUrl": "https://app.test/cancel",
        },
    )

    assert response.json()["data"] == {"sessionId": "cs_1", "url": "https://checkout.test/1"}
    assert len(billing.customers) == 1


def _event(user_id):
    return json.dumps(
        {
            "id": "evt_1",
            "type": "customer.subscription.created",
            "data": {
                "object": {
                    "id": "sub_1",
                    "customer": "cus_1",
                    "status": "active",
                    "metadata": {"userId": str(user_id), "planType": "pro_max"},
                }
            },
        }
    )


async def test_webhook_updates_tier(client, make_user):
    user = await make_user()

    no_signature = await client.post("/api/subscriptions/webhook", content=_event(user.id))
    bad_signature = await client.post(
        "/api/subscriptions/webhook",
        content=_event(user.id),
        headers={"Stripe-Signature": "forged"},
    )
    accepted = await client.post(
        "/api/subscriptions/webhook",
        content=_event(user.id),
        headers={"Stripe-Signature": "valid-signature"},
    )

    assert no_signature.json()["error"] == "No signature"
    assert bad_signature.status_code == 400
    assert bad_signature.json()["error"] == "Webhook processing failed"
    assert accepted.json()["data"] == {"received": True}

    access = await client.get(f"/api/subscriptions/access/{user.id}")
    assert access.json()["data"]["subscriptionTier"] == "pro_max"


@pytest.mark.parametrize("path", ["/api/subscriptions/create-session", "/api/subscriptions/webhook"])
async def test_billing_routes_unavailable_without_provider(session_factory, path):
    app = create_app(TemplateCoachGenerator(), billing=None, session_factory=session_factory)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            path,
            json={
                "userId": 1,
                "priceId": "p",
                "planType": "plus",
                "successUrl": "s",
                "cancelUrl": "c",
            },
            headers={"Stripe-Signature": "valid-signature"},
        )

    assert response.status_code == 503
    assert response.json()["error"] == "Billing is not configured"


async def test_notification_preferences(client, make_user):
    user = await make_user()

    update = await client.post(
        "/api/notifications/preferences",
        json={"userId": user.id, "reminderType": "daily", "enabled": False, "timePreference": "08:30"},
    )
    token = await client.post(
        "/api/notifications/push-token", json={"userId": user.id, "pushToken": "ExpoToken[1]"}
    )
    prefs = await client.get(f"/api/notifications/preferences/{user.id}")

    assert update.json()["message"] == "Notification preferences updated"
    assert token.json()["data"] == {"updated": 1}
    assert prefs.json()["data"] == {
        "daily": {"enabled": False, "timePreference": "08:30", "pushToken": "ExpoToken[1]"}
    }


async def test_bad_time_preference_is_rejected(client, make_user):
    user = await make_user()

    response = await client.post(
        "/api/notifications/preferences",
        json={"userId": user.id, "reminderType": "daily", "enabled": True, "timePreference": "25:00"},
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "timePreference"


async def test_admin_trigger_runs_weekly_batch(client, admin_headers, make_user):
    await make_user()

    response = await client.post("/api/notifications/admin/trigger/weekly", headers=admin_headers)

    assert response.json()["data"] == {
        "sessionType": "weekly_reflection",
        "sent": 1,
        "skipped": 0,
        "failed": 0,
    }


async def test_unhandled_errors_are_wrapped(app, client):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    response = await client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}


async def test_register_user_then_use_it(client):
    created = await client.post(
        "/api/users",
        json={"email": "Dana@Example.com", "firstName": "Dana", "relationshipStatus": "dating"},
    )
    user = created.json()["data"]

    assert created.status_code == 201
    assert user["email"] == "dana@example.com"
    assert user["subscriptionTier"] == "free"

    duplicate = await client.post(
        "/api/users", json={"email": "dana@example.com", "firstName": "Other"}
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "Email already registered"

    fetched = await client.get(f"/api/users/{user['id']}")
    assert fetched.json()["data"]["relationshipStatus"] == "dating"

    coached = await client.post("/api/ai-coach", json={"userId": user["id"]})
    assert coached.status_code == 200


async def test_register_rejects_bad_email(client):
    response = await client.post("/api/users", json={"email": "nope", "firstName": "X"})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "email"


async def test_progress_endpoints(client, make_user):
    user = await make_user()

    logged = await client.post(
        "/api/progress/activity",
        json={"userId": user.id, "actionType": "quiz_completed", "metadata": {"quiz": "love"}},
    )
    await client.post(
        "/api/progress/activity",
        json={"userId": user.id, "actionType": "quiz_completed", "value": 2},
    )
    await client.post("/api/ai-coach", json={"userId": user.id})
    progress = await client.get(f"/api/progress/{user.id}")
    activity = await client.get(f"/api/progress/activity/{user.id}")

    assert logged.json()["message"] == "Activity logged successfully"
    data = progress.json()["data"]
    assert data["totalCheckIns"] == 1
    assert data["daysActive"] == 1
    assert data["currentStreak"] == 0
    assert data["recentActivity"][0]["actionType"] == "quiz_completed"
    assert data["recentActivity"][0]["value"] == 3
    assert data["recentActivity"][0]["metadata"] == {"quiz": "love"}
    assert [item["count"] for item in data["weeklyEngagement"]] == [1]
    assert len(activity.json()["data"]) == 1


async def test_progress_activity_requires_known_user(client):
    response = await client.post(
        "/api/progress/activity", json={"userId": 404, "actionType": "login"}
    )

    assert response.status_code == 404


async def test_activity_range_rejects_reversed_dates(client, make_user):
    user = await make_user()

    response = await client.get(
        f"/api/progress/activity/{user.id}?startDate=2024-05-10&endDate=2024-05-01"
    )

    assert response.status_code == 400


async def test_admin_audit_log_lists_promo_changes(client, admin_headers):
    await client.post(
        "/api/promo/admin/promo", json={"code": "AUDIT", "planType": "pro"}, headers=admin_headers
    )

    denied = await client.get("/api/admin/audit-log")
    listed = await client.get("/api/admin/audit-log?action=promo_created", headers=admin_headers)

    assert denied.status_code == 403
    entries = listed.json()["data"]
    assert [entry["action"] for entry in entries] == ["promo_created"]
    assert entries[0]["payload"]["code"] == "AUDIT"

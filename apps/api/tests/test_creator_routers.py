import pytest

from conftest import (
    CSRF_HEADERS,
    VALID_BIO,
    VALID_DESCRIPTION,
    admin_headers,
    make_community,
    make_user,
    user_headers,
)
from creator_program.core.security import ADMIN_SCOPE, create_session_token


def _application_body(display_name: str = "Speedy Runner", follower_count: int = 1200) -> dict:
    return {
        "display_name": display_name,
        "primary_platform": "twitch",
        "platforms": [
            {
                "type": "twitch",
                "url": "https://twitch.tv/speedy",
                "handle": "speedy",
                "follower_count": follower_count,
            }
        ],
        "description": VALID_DESCRIPTION,
        "bio": VALID_BIO,
    }


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_me_requires_authentication(client):
    response = await client.get("/creators/me")

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.json()["code"] == "unauthorized"


@pytest.mark.asyncio
async def test_mutations_require_csrf_header(client, user):
    headers = user_headers(user)
    headers.pop("X-Requested-With")

    response = await client.post(
        "/creator-applications", json=_application_body(), headers=headers
    )

    assert response.status_code == 403
    assert response.json()["code"] == "csrf_required"


@pytest.mark.asyncio
async def test_invalid_body_is_a_validation_error(client, user):
    response = await client.post("/creator-applications", json={}, headers=user_headers(user))

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_full_review_flow(client, db, user, admin_a, admin_b):
    submitted = await client.post(
        "/creator-applications", json=_application_body(), headers=user_headers(user)
    )
    assert submitted.status_code == 201
    application_id = submitted.json()["application"]["id"]

    mine = await client.get("/creators/me", headers=user_headers(user))
    assert mine.json()["state"] == "application"
    assert mine.json()["application"]["status"] == "submitted"

    first = await client.post(
        f"/admin/creator-applications/{application_id}/approve", headers=admin_headers(admin_a)
    )
    assert first.status_code == 200
    assert first.json()["needs_second_approval"] is True
    assert first.json()["first_approver"] == "Alice Admin"

    repeat = await client.post(
        f"/admin/creator-applications/{application_id}/approve", headers=admin_headers(admin_a)
    )
    assert repeat.status_code == 409
    assert repeat.json()["code"] == "duplicate_approver"

    second = await client.post(
        f"/admin/creator-applications/{application_id}/approve", headers=admin_headers(admin_b)
    )
    assert second.status_code == 200
    body = second.json()
    assert body["needs_second_approval"] is False
    assert body["creator_id"] is not None
    assert body["application"]["status"] == "approved"
    assert body["application"]["creator_status"] == "active"

    mine = await client.get("/creators/me", headers=user_headers(user))
    state = mine.json()
    assert state["state"] == "creator"
    assert state["creator"]["slug"] == "speedy-runner"
    assert state["entitlements"]["personal_plan"] == "base"
    assert state["entitlements"]["community_plan"]["active"] is False

    public = await client.get("/creators/speedy-runner")
    assert public.status_code == 200
    assert "status" not in public.json()

    listing = await client.get("/creators")
    assert [c["slug"] for c in listing.json()["items"]] == ["speedy-runner"]


@pytest.mark.asyncio
async def test_owner_override_via_api(client, user, owner, admin_a):
    submitted = await client.post(
        "/creator-applications", json=_application_body(), headers=user_headers(user)
    )
    application_id = submitted.json()["application"]["id"]

    denied = await client.post(
        f"/admin/creator-applications/{application_id}/approve",
        json={"owner_override": True},
        headers=admin_headers(admin_a),
    )
    assert denied.status_code == 403

    approved = await client.post(
        f"/admin/creator-applications/{application_id}/approve",
        json={"owner_override": True},
        headers=admin_headers(owner),
    )
    assert approved.status_code == 200
    assert approved.json()["needs_second_approval"] is False


@pytest.mark.asyncio
async def test_reject_and_list_applications(client, user, admin_a):
    submitted = await client.post(
        "/creator-applications", json=_application_body(), headers=user_headers(user)
    )
    application_id = submitted.json()["application"]["id"]

    missing_reason = await client.post(
        f"/admin/creator-applications/{application_id}/reject",
        json={},
        headers=admin_headers(admin_a),
    )
    assert missing_reason.status_code == 400

    rejected = await client.post(
        f"/admin/creator-applications/{application_id}/reject",
        json={"rejection_reason": "Not a fit", "admin_notes": "checked twice"},
        headers=admin_headers(admin_a),
    )
    assert rejected.status_code == 200
    assert rejected.json()["application"]["status"] == "rejected"

    listing = await client.get(
        "/admin/creator-applications?status=rejected", headers=admin_headers(admin_a)
    )
    assert listing.json()["pagination"]["total_items"] == 1
    assert listing.json()["items"][0]["admin_notes"] == "checked twice"

    excluded = await client.get(
        "/admin/creator-applications?exclude_status=rejected", headers=admin_headers(admin_a)
    )
    assert excluded.json()["items"] == []


@pytest.mark.asyncio
async def test_user_token_cannot_reach_admin_routes(client, user):
    response = await client.get("/admin/creators", headers=user_headers(user))

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_for_unknown_admin_is_forbidden(client, db, user):
    token = create_session_token(user.id, 1, scope=ADMIN_SCOPE)

    response = await client.get(
        "/admin/creators", headers={"Authorization": f"Bearer {token}", **CSRF_HEADERS}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_deactivated_admin_is_forbidden(client, db, admin_a):
    headers = admin_headers(admin_a)
    admin_a.is_active = False
    db.commit()

    response = await client.get("/admin/creators", headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_sync_followers_cooldown_returns_retry_after(client, user, creator):
    body = {"platforms": [{"type": "twitch", "follower_count": 100}]}

    first = await client.post("/creators/me/sync-followers", json=body, headers=user_headers(user))
    assert first.status_code == 200
    assert first.json()["status"] == "warned"
    assert first.json()["grace_period_ends_at"] is not None

    second = await client.post("/creators/me/sync-followers", json=body, headers=user_headers(user))
    assert second.status_code == 429
    assert second.json()["code"] == "sync_cooldown"
    assert int(second.headers["Retry-After"]) > 0


@pytest.mark.asyncio
async def test_community_promotion_via_api(client, db, user, creator):
    community = make_community(db, user, name="Alpha Guild")

    listing = await client.get("/creators/me/communities", headers=user_headers(user))
    assert listing.json()["items"][0]["eligible"] is True

    applied = await client.post(
        f"/creators/me/communities/{community.id}/promotion", headers=user_headers(user)
    )
    assert applied.status_code == 200
    assert applied.json()["message"] == "Base Plan promotion applied to Alpha Guild"

    mine = await client.get("/creators/me", headers=user_headers(user))
    assert mine.json()["entitlements"]["community_plan"]["community_name"] == "Alpha Guild"


@pytest.mark.asyncio
async def test_leave_program_via_api(client, user, creator):
    response = await client.post("/creators/me/remove", headers=user_headers(user))

    assert response.status_code == 200
    assert response.json()["creator"]["status"] == "removed"

    mine = await client.get("/creators/me", headers=user_headers(user))
    assert mine.json()["state"] == "removed"

    public = await client.get(f"/creators/{creator.slug}")
    assert public.status_code == 404


@pytest.mark.asyncio
async def test_update_profile_validates_theme_color(client, user, creator):
    bad = await client.patch(
        "/creators/me", json={"theme_color": "#000000"}, headers=user_headers(user)
    )
    assert bad.status_code == 400

    good = await client.patch(
        "/creators/me",
        json={"theme_color": "#3B82F6", "bio": "Still speedrunning every night"},
        headers=user_headers(user),
    )
    assert good.status_code == 200
    assert good.json()["creator"]["theme_color"] == "#3b82f6"


@pytest.mark.asyncio
async def test_admin_creator_management(client, db, creator, admin_a):
    recipient = make_user(db)

    warned = await client.post(
        f"/admin/creators/{creator.id}/warn",
        json={"reason": "spam", "message": "Please stop"},
        headers=admin_headers(admin_a),
    )
    assert warned.json()["creator"]["status"] == "warned"

    granted = await client.post(
        f"/admin/creators/{creator.id}/entitlements",
        json={"target_type": "user", "target_id": str(recipient.id)},
        headers=admin_headers(admin_a),
    )
    assert granted.status_code == 201
    assert granted.json()["subscription_applied"] is True

    analytics = await client.get("/admin/creators/analytics", headers=admin_headers(admin_a))
    assert analytics.json()["active_entitlements"] == 2

    removed = await client.post(
        f"/admin/creators/{creator.id}/remove",
        json={"reason": "Repeated spam"},
        headers=admin_headers(admin_a),
    )
    assert removed.json()["creator"]["removal_reason"] == "Repeated spam"

    again = await client.post(
        f"/admin/creators/{creator.id}/remove",
        json={"reason": "Repeated spam"},
        headers=admin_headers(admin_a),
    )
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_admin_sync_all(client, creator, admin_a):
    response = await client.post("/admin/creators/sync-all", headers=admin_headers(admin_a))

    assert response.status_code == 200
    assert response.json()["processed"] == 1
    assert response.json()["timed_out"] is False


@pytest.mark.asyncio
async def test_internal_sweep_requires_secret(client, creator):
    missing = await client.post("/internal/scheduled/creator-sweep")
    wrong = await client.post(
        "/internal/scheduled/creator-sweep", headers={"X-Internal-Secret": "nope"}
    )
    ok = await client.post(
        "/internal/scheduled/creator-sweep",
        headers={"X-Internal-Secret": "test-internal-secret"},
    )

    assert missing.status_code == 400
    assert wrong.status_code == 403
    assert ok.status_code == 200
    assert ok.json()["processed"] == 1

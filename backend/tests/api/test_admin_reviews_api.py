import pytest

ADMIN = {"X-User-Id": "mod-1", "X-User-Roles": "admin"}
CLEAN_COMMENT = "Wonderful session, very professional and kind."


async def _submit_held(api_client) -> str:
    resp = await api_client.post(
        "/api/reviews",
        json={"recipient_id": "artist-1", "rating": 5, "title": "Great work", "comment": CLEAN_COMMENT},
        headers={"X-User-Id": "newbie"},
    )
    assert resp.status_code == 201
    return resp.json()["review"]["id"]


@pytest.mark.asyncio
async def test_admin_routes_require_admin_role(api_client, community) -> None:
    resp = await api_client.get("/api/admin/reviews/held", headers={"X-User-Id": "veteran"})

    assert resp.status_code == 403
    assert resp.json()["detail"] == "insufficient_role"


@pytest.mark.asyncio
async def test_held_queue_includes_flags(api_client, community, notifier) -> None:
    review_id = await _submit_held(api_client)

    resp = await api_client.get("/api/admin/reviews/held", headers=ADMIN)

    assert resp.status_code == 200
    items = resp.json()
    assert [item["id"] for item in items] == [review_id]
    assert items[0]["flags"] == ["NEW_ACCOUNT"]


@pytest.mark.asyncio
async def test_approval_publishes_and_is_audited(api_client, community, notifier) -> None:
    review_id = await _submit_held(api_client)

    resp = await api_client.put(
        f"/api/admin/reviews/{review_id}/moderate",
        json={"is_approved": True, "reason": "verified customer"},
        headers=ADMIN,
    )

    assert resp.status_code == 200
    assert resp.json()["is_approved"] is True
    listing = await api_client.get("/api/reviews", params={"recipient_id": "artist-1"})
    assert listing.json()["total"] == 1
    audit = await api_client.get("/api/admin/audit", headers=ADMIN)
    entries = audit.json()
    assert entries[0]["review_id"] == review_id
    assert entries[0]["moderator_id"] == "mod-1"
    assert entries[0]["action"] == "MODERATE_REVIEW"


@pytest.mark.asyncio
async def test_moderating_unknown_review_is_404(api_client, community) -> None:
    resp = await api_client.put("/api/admin/reviews/missing/moderate", json={"is_hidden": True}, headers=ADMIN)

    assert resp.status_code == 404
    assert resp.json()["detail"] == "review_not_found"


@pytest.mark.asyncio
async def test_empty_moderation_is_rejected(api_client, community, notifier) -> None:
    review_id = await _submit_held(api_client)

    resp = await api_client.put(f"/api/admin/reviews/{review_id}/moderate", json={}, headers=ADMIN)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "validation_error"


@pytest.mark.asyncio
async def test_admin_listing_filters_by_state(api_client, community, notifier) -> None:
    await _submit_held(api_client)

    held = await api_client.get("/api/admin/reviews", params={"is_approved": "false"}, headers=ADMIN)
    approved = await api_client.get("/api/admin/reviews", params={"is_approved": "true"}, headers=ADMIN)

    assert held.json()["total"] == 1
    assert approved.json()["total"] == 0

"""Admin user management tests: listing and soft delete."""

import pytest


@pytest.mark.asyncio
async def test_admin_lists_users(client, farmer, official, admin, auth_headers):
    r = await client.get("/api/users", headers=auth_headers(admin))
    assert r.status_code == 200
    assert {u["id"] for u in r.json()} == {str(farmer.id), str(official.id), str(admin.id)}

    r = await client.get("/api/users", params={"role": "government"}, headers=auth_headers(admin))
    assert [u["id"] for u in r.json()] == [str(official.id)]


@pytest.mark.asyncio
async def test_non_admin_cannot_manage_users(client, farmer, make_user, auth_headers):
    staff = await make_user("staff")
    for user in (farmer, staff):
        r = await client.get("/api/users", headers=auth_headers(user))
        assert r.status_code == 403


@pytest.mark.asyncio
async def test_deactivated_token_stops_working(client, farmer, admin, auth_headers):
    headers = auth_headers(farmer)
    assert (await client.get("/api/auth/me", headers=headers)).status_code == 200

    r = await client.put(
        f"/api/users/{farmer.id}/active", json={"isActive": False}, headers=auth_headers(admin)
    )
    assert r.status_code == 200
    assert r.json()["isActive"] is False

    r = await client.get("/api/auth/me", headers=headers)
    assert r.status_code == 401
    assert r.json()["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_reactivation_restores_access(client, farmer, admin, auth_headers):
    url = f"/api/users/{farmer.id}/active"
    await client.put(url, json={"isActive": False}, headers=auth_headers(admin))
    await client.put(url, json={"isActive": True}, headers=auth_headers(admin))

    r = await client.get("/api/auth/me", headers=auth_headers(farmer))
    assert r.status_code == 200

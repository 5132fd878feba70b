"""Government official API tests."""

import pytest


def _official_body(**overrides) -> dict:
    body = {
        "name": "Officer Rao",
        "phone": "555-0200",
        "department": "Agriculture Department",
        "position": "Director",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_list_and_get_officials(client, farmer, official, auth_headers):
    r = await client.get("/api/government", headers=auth_headers(farmer))
    assert r.status_code == 200
    assert [o["id"] for o in r.json()] == [str(official.id)]

    r = await client.get(f"/api/government/{official.id}", headers=auth_headers(farmer))
    assert r.json()["department"] == "Agriculture Department"


@pytest.mark.asyncio
async def test_get_farmer_as_official_is_404(client, farmer, auth_headers):
    r = await client.get(f"/api/government/{farmer.id}", headers=auth_headers(farmer))
    assert r.status_code == 404
    assert r.json()["message"] == "Government official not found"


@pytest.mark.asyncio
async def test_search_by_department(client, official, make_user, auth_headers):
    await make_user("government", department="Water Board")
    r = await client.get(
        "/api/government/department/agriculture", headers=auth_headers(official)
    )
    assert [o["id"] for o in r.json()] == [str(official.id)]


@pytest.mark.asyncio
async def test_official_updates_self(client, official, auth_headers):
    r = await client.put(
        f"/api/government/{official.id}",
        json=_official_body(),
        headers=auth_headers(official),
    )
    assert r.status_code == 200
    assert r.json()["position"] == "Director"


@pytest.mark.asyncio
async def test_official_cannot_change_own_permissions(client, official, auth_headers):
    r = await client.put(
        f"/api/government/{official.id}",
        json=_official_body(permissions=["admin"]),
        headers=auth_headers(official),
    )
    assert r.status_code == 403
    assert r.json()["message"] == "Only admins can change permissions"


@pytest.mark.asyncio
async def test_official_cannot_update_other_official(client, official, make_user, auth_headers):
    other = await make_user("government")
    r = await client.put(
        f"/api/government/{other.id}",
        json=_official_body(),
        headers=auth_headers(official),
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_admin_sets_permissions(client, official, admin, auth_headers):
    r = await client.put(
        f"/api/government/{official.id}",
        json=_official_body(permissions=["read", "approve", "read"]),
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["permissions"] == ["read", "approve"]


@pytest.mark.asyncio
async def test_unknown_permission_rejected(client, official, admin, auth_headers):
    r = await client.post(
        f"/api/government/{official.id}/permissions",
        json={"permission": "launch"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_permission_add_remove(client, official, admin, auth_headers):
    url = f"/api/government/{official.id}/permissions"
    await client.post(url, json={"permission": "write"}, headers=auth_headers(admin))
    r = await client.post(url, json={"permission": "write"}, headers=auth_headers(admin))
    assert r.json()["permissions"] == ["write"]

    r = await client.delete(f"{url}/write", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["permissions"] == []


@pytest.mark.asyncio
async def test_permission_endpoints_are_admin_only(client, official, auth_headers):
    r = await client.post(
        f"/api/government/{official.id}/permissions",
        json={"permission": "write"},
        headers=auth_headers(official),
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_government_summary(client, official, admin, make_user, auth_headers):
    await make_user("government", department="Water Board", position="Inspector")
    await client.post(
        f"/api/government/{official.id}/permissions",
        json={"permission": "read"},
        headers=auth_headers(admin),
    )

    r = await client.get("/api/government/stats/summary", headers=auth_headers(official))
    assert r.status_code == 200
    data = r.json()
    assert data["totalOfficials"] == 2
    assert {"_id": "Inspector", "count": 2} in data["officialsByPosition"]
    assert len(data["officialsByDepartment"]) == 2
    assert data["permissionsSummary"] == [{"_id": "read", "count": 1}]

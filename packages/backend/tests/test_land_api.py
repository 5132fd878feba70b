"""Land parcel API tests: validation, ownership, listing, summary."""

import json
import uuid

import pytest


def _parcel(**overrides) -> dict:
    body = {
        "name": "North Field",
        "area": 10,
        "crop": "Wheat",
        "soilType": "Loamy",
        "coordinates": [12.5, 77.1],
    }
    body.update(overrides)
    return body


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_farmer_creates_land(client, farmer, auth_headers):
    r = await client.post(
        "/api/land",
        json=_parcel(actualYield=40, investment=1000, revenue=1500),
        headers=auth_headers(farmer),
    )
    assert r.status_code == 201
    land = r.json()
    assert land["farmer"]["id"] == str(farmer.id)
    assert land["farmer"]["email"] == farmer.email
    assert land["status"] == "Active"
    assert land["coordinates"] == [12.5, 77.1]
    assert land["areaInHectares"] == pytest.approx(4.0469, rel=1e-3)
    assert land["yieldPerAcre"] == 4
    assert land["profit"] == 500
    assert land["lastUpdated"]


@pytest.mark.asyncio
async def test_owner_comes_from_token_not_body(client, farmer, make_user, auth_headers):
    other = await make_user("farmer")
    r = await client.post(
        "/api/land",
        json=_parcel(farmer=str(other.id), farmerId=str(other.id)),
        headers=auth_headers(farmer),
    )
    assert r.status_code == 201
    assert r.json()["farmer"]["id"] == str(farmer.id)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "coordinates", [[91, 0], [-91, 0], [0, 181], [0, -181], [1.0], [1, 2, 3]]
)
async def test_invalid_coordinates_rejected(client, farmer, auth_headers, coordinates):
    r = await client.post(
        "/api/land",
        json=_parcel(coordinates=coordinates),
        headers=auth_headers(farmer),
    )
    assert r.status_code == 400
    assert r.json()["errors"][0]["param"] == "coordinates"

    listing = await client.get("/api/land", headers=auth_headers(farmer))
    assert listing.json() == []


@pytest.mark.asyncio
async def test_boundary_coordinates_accepted(client, farmer, auth_headers):
    r = await client.post(
        "/api/land",
        json=_parcel(coordinates=[-90, 180]),
        headers=auth_headers(farmer),
    )
    assert r.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"area": 0}, {"area": -5}, {"soilType": "Gravel"}, {"status": "Burning"}, {"name": ""}],
)
async def test_invalid_fields_rejected(client, farmer, auth_headers, overrides):
    r = await client.post(
        "/api/land", json=_parcel(**overrides), headers=auth_headers(farmer)
    )
    assert r.status_code == 400


def _raw_with(field: str, literal: str, **overrides) -> str:
    """JSON text with a bare NaN/Infinity literal, which httpx will not encode."""
    return json.dumps(_parcel(**{field: "__LITERAL__"}, **overrides)).replace(
        '"__LITERAL__"', literal
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field,literal",
    [
        ("area", "Infinity"),
        ("area", "NaN"),
        ("actualYield", "Infinity"),
        ("expectedYield", "-Infinity"),
        ("revenue", "Infinity"),
        ("temperature", "NaN"),
    ],
)
async def test_non_finite_numbers_rejected(
    client, farmer, make_user, auth_headers, field, literal
):
    headers = {**auth_headers(farmer), "Content-Type": "application/json"}
    r = await client.post("/api/land", content=_raw_with(field, literal), headers=headers)
    assert r.status_code == 400
    assert r.json()["errors"][0]["param"] == field

    listing = await client.get("/api/land", headers=auth_headers(farmer))
    assert listing.json() == []

    analyst = await make_user("analyst")
    for path in ("/api/analytics", "/api/analytics/land", "/api/land/stats/summary"):
        r = await client.get(path, headers=auth_headers(analyst))
        assert r.status_code == 200, path


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["analyst", "government", "staff"])
async def test_non_writer_roles_cannot_create(client, make_user, auth_headers, role):
    user = await make_user(role)
    r = await client.post("/api/land", json=_parcel(), headers=auth_headers(user))
    assert r.status_code == 403
    assert r.json()["code"] == "FORBIDDEN"


# ═══════════════════════════════════════════════════════════
# Ownership
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_other_farmer_cannot_edit_or_delete(client, farmer, make_user, auth_headers):
    created = await client.post("/api/land", json=_parcel(), headers=auth_headers(farmer))
    land_id = created.json()["id"]
    intruder = await make_user("farmer")

    r = await client.put(
        f"/api/land/{land_id}",
        json=_parcel(name="Stolen"),
        headers=auth_headers(intruder),
    )
    assert r.status_code == 403
    assert r.json()["message"] == "Not authorized"

    r = await client.delete(f"/api/land/{land_id}", headers=auth_headers(intruder))
    assert r.status_code == 403

    unchanged = await client.get(f"/api/land/{land_id}", headers=auth_headers(farmer))
    assert unchanged.json()["name"] == "North Field"


@pytest.mark.asyncio
async def test_owner_updates_land(client, farmer, auth_headers):
    created = await client.post("/api/land", json=_parcel(), headers=auth_headers(farmer))
    land = created.json()

    r = await client.put(
        f"/api/land/{land['id']}",
        json=_parcel(name="Renamed", area=12, status="Harvested"),
        headers=auth_headers(farmer),
    )
    assert r.status_code == 200
    updated = r.json()
    assert updated["name"] == "Renamed"
    assert updated["area"] == 12
    assert updated["status"] == "Harvested"
    assert updated["lastUpdated"] >= land["lastUpdated"]


@pytest.mark.asyncio
async def test_update_keeps_status_when_omitted(client, farmer, auth_headers):
    created = await client.post(
        "/api/land", json=_parcel(status="Fallow"), headers=auth_headers(farmer)
    )
    land_id = created.json()["id"]
    body = _parcel()
    del body["coordinates"]

    r = await client.put(f"/api/land/{land_id}", json=body, headers=auth_headers(farmer))
    assert r.status_code == 200
    assert r.json()["status"] == "Fallow"
    assert r.json()["coordinates"] == [12.5, 77.1]


@pytest.mark.asyncio
async def test_admin_can_edit_any_land(client, farmer, admin, auth_headers):
    created = await client.post("/api/land", json=_parcel(), headers=auth_headers(farmer))
    land_id = created.json()["id"]

    r = await client.put(
        f"/api/land/{land_id}",
        json=_parcel(crop="Rice"),
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["crop"] == "Rice"
    # Ownership does not move to the admin
    assert r.json()["farmer"]["id"] == str(farmer.id)


@pytest.mark.asyncio
async def test_owner_deletes_land(client, farmer, auth_headers):
    created = await client.post("/api/land", json=_parcel(), headers=auth_headers(farmer))
    land_id = created.json()["id"]

    r = await client.delete(f"/api/land/{land_id}", headers=auth_headers(farmer))
    assert r.status_code == 200
    assert r.json() == {"message": "Land record removed"}

    r = await client.get(f"/api/land/{land_id}", headers=auth_headers(farmer))
    assert r.status_code == 404
    assert r.json()["message"] == "Land record not found"


@pytest.mark.asyncio
async def test_unknown_land_is_404(client, farmer, auth_headers):
    r = await client.put(
        f"/api/land/{uuid.uuid4()}", json=_parcel(), headers=auth_headers(farmer)
    )
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Listing
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_is_most_recent_first(client, farmer, auth_headers):
    for name in ("First", "Second", "Third"):
        await client.post("/api/land", json=_parcel(name=name), headers=auth_headers(farmer))

    r = await client.get("/api/land", headers=auth_headers(farmer))
    assert [land["name"] for land in r.json()] == ["Third", "Second", "First"]


@pytest.mark.asyncio
async def test_list_by_farmer(client, farmer, make_user, auth_headers):
    other = await make_user("farmer")
    await client.post("/api/land", json=_parcel(name="Mine"), headers=auth_headers(farmer))
    await client.post("/api/land", json=_parcel(name="Theirs"), headers=auth_headers(other))

    r = await client.get(f"/api/land/farmer/{farmer.id}", headers=auth_headers(other))
    assert r.status_code == 200
    assert [land["name"] for land in r.json()] == ["Mine"]


@pytest.mark.asyncio
async def test_any_role_can_read(client, farmer, make_user, auth_headers):
    await client.post("/api/land", json=_parcel(), headers=auth_headers(farmer))
    analyst = await make_user("analyst")

    r = await client.get("/api/land", headers=auth_headers(analyst))
    assert r.status_code == 200
    assert len(r.json()) == 1


@pytest.mark.asyncio
async def test_land_summary(client, farmer, auth_headers):
    await client.post("/api/land", json=_parcel(area=10, crop="Wheat"), headers=auth_headers(farmer))
    await client.post(
        "/api/land",
        json=_parcel(area=5, crop="Corn", status="Fallow"),
        headers=auth_headers(farmer),
    )

    r = await client.get("/api/land/stats/summary", headers=auth_headers(farmer))
    assert r.status_code == 200
    data = r.json()
    assert data["totalLandArea"] == 15
    assert data["totalRecords"] == 2
    crops = {c["_id"]: c for c in data["cropDistribution"]}
    assert crops["Wheat"]["count"] == 1
    assert crops["Wheat"]["totalArea"] == 10
    assert {"_id": "Fallow", "count": 1} in data["statusDistribution"]

"""Subsidy tests: programmes, applications, reviews."""

import uuid

import pytest
import pytest_asyncio

from greenlands.services.subsidy_service import DEFAULT_SUBSIDIES, SubsidyService


@pytest_asyncio.fixture()
async def seeded(db_session):
    return await SubsidyService(db_session).seed()


@pytest.mark.asyncio
async def test_list_is_sorted_by_deadline(client, farmer, seeded, auth_headers):
    r = await client.get("/api/subsidies", headers=auth_headers(farmer))
    assert r.status_code == 200
    names = [s["name"] for s in r.json()]
    assert names == [
        "Drought Relief Fund",
        "Organic Farming Support",
        "Irrigation Equipment Grant",
    ]


@pytest.mark.asyncio
async def test_seed_replaces_existing(db_session, seeded):
    await SubsidyService(db_session).seed(replace=True)
    subsidies = await SubsidyService(db_session).list_subsidies()
    assert len(subsidies) == len(DEFAULT_SUBSIDIES)


@pytest.mark.asyncio
async def test_seed_keep_appends(db_session, seeded):
    await SubsidyService(db_session).seed(replace=False)
    subsidies = await SubsidyService(db_session).list_subsidies()
    assert len(subsidies) == 2 * len(DEFAULT_SUBSIDIES)


@pytest.mark.asyncio
async def test_official_creates_subsidy(client, official, farmer, auth_headers):
    r = await client.post(
        "/api/subsidies",
        json={
            "name": "Solar Pump Scheme",
            "description": "Half the cost of a solar pump.",
            "eligibility": "Farmers with a borewell.",
            "applicationDeadline": "2030-06-30T00:00:00Z",
        },
        headers=auth_headers(official),
    )
    assert r.status_code == 201

    r = await client.post(
        "/api/subsidies",
        json={
            "name": "Self Help",
            "description": "x",
            "eligibility": "x",
            "applicationDeadline": "2030-06-30T00:00:00Z",
        },
        headers=auth_headers(farmer),
    )
    assert r.status_code == 403


# ═══════════════════════════════════════════════════════════
# Applications
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_apply(client, farmer, seeded, auth_headers):
    r = await client.post(
        "/api/subsidies/apply",
        json={"subsidyId": str(seeded[0].id), "applicationData": {"acres": 4}},
        headers=auth_headers(farmer),
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["application"]["status"] == "pending"
    assert body["application"]["farmerId"] == str(farmer.id)
    assert body["application"]["applicationData"] == {"acres": 4}


@pytest.mark.asyncio
async def test_apply_without_subsidy_id(client, farmer, auth_headers):
    r = await client.post("/api/subsidies/apply", json={}, headers=auth_headers(farmer))
    assert r.status_code == 400
    assert r.json()["message"] == "Subsidy ID is required"


@pytest.mark.asyncio
async def test_apply_unknown_subsidy(client, farmer, auth_headers):
    r = await client.post(
        "/api/subsidies/apply",
        json={"subsidyId": str(uuid.uuid4())},
        headers=auth_headers(farmer),
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Subsidy not found"


@pytest.mark.asyncio
async def test_only_farmers_apply(client, official, seeded, auth_headers):
    r = await client.post(
        "/api/subsidies/apply",
        json={"subsidyId": str(seeded[0].id)},
        headers=auth_headers(official),
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_application_listing_scope(
    client, farmer, official, make_user, seeded, auth_headers
):
    other = await make_user("farmer")
    for applicant in (farmer, other):
        await client.post(
            "/api/subsidies/apply",
            json={"subsidyId": str(seeded[1].id)},
            headers=auth_headers(applicant),
        )

    mine = (
        await client.get("/api/subsidies/applications", headers=auth_headers(farmer))
    ).json()
    assert [a["farmerId"] for a in mine] == [str(farmer.id)]

    everything = (
        await client.get("/api/subsidies/applications", headers=auth_headers(official))
    ).json()
    assert len(everything) == 2


@pytest.mark.asyncio
async def test_review_application(client, farmer, official, seeded, auth_headers):
    applied = (
        await client.post(
            "/api/subsidies/apply",
            json={"subsidyId": str(seeded[0].id)},
            headers=auth_headers(farmer),
        )
    ).json()["application"]
    url = f"/api/subsidies/applications/{applied['id']}"

    r = await client.put(url, json={"status": "approved"}, headers=auth_headers(farmer))
    assert r.status_code == 403

    r = await client.put(
        url,
        json={"status": "approved", "reviewNote": "Documents verified"},
        headers=auth_headers(official),
    )
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "approved"
    assert body["reviewedBy"] == str(official.id)
    assert body["reviewNote"] == "Documents verified"


@pytest.mark.asyncio
async def test_review_unknown_application(client, official, auth_headers):
    r = await client.put(
        f"/api/subsidies/applications/{uuid.uuid4()}",
        json={"status": "rejected"},
        headers=auth_headers(official),
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Application not found"

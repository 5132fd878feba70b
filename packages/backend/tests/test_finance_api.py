"""Finance API tests: the farmer-scoped ledger."""

import pytest


@pytest.mark.asyncio
async def test_empty_report(client, farmer, auth_headers):
    r = await client.get("/api/finance/report", headers=auth_headers(farmer))
    assert r.status_code == 200
    assert r.json() == {
        "totalIncome": 0,
        "totalExpenses": 0,
        "balance": 0,
        "transactions": [],
    }


@pytest.mark.asyncio
async def test_balance_is_income_minus_expenses(client, farmer, auth_headers):
    headers = auth_headers(farmer)
    for txn in (
        {"type": "income", "amount": 1000, "date": "2026-01-10T00:00:00Z", "category": "Sales"},
        {"type": "expense", "amount": 250.5, "date": "2026-02-01T00:00:00Z"},
        {"type": "income", "amount": 300, "date": "2026-03-05T00:00:00Z"},
    ):
        r = await client.post("/api/finance/transactions", json=txn, headers=headers)
        assert r.status_code == 201

    data = (await client.get("/api/finance/report", headers=headers)).json()
    assert data["totalIncome"] == 1300
    assert data["totalExpenses"] == 250.5
    assert data["balance"] == data["totalIncome"] - data["totalExpenses"]
    assert [t["amount"] for t in data["transactions"]] == [300, 250.5, 1000]


@pytest.mark.asyncio
async def test_ledger_is_per_farmer(client, farmer, make_user, auth_headers):
    other = await make_user("farmer")
    await client.post(
        "/api/finance/transactions",
        json={"type": "income", "amount": 99},
        headers=auth_headers(other),
    )

    data = (await client.get("/api/finance/report", headers=auth_headers(farmer))).json()
    assert data["transactions"] == []


@pytest.mark.asyncio
async def test_invalid_transactions_rejected(client, farmer, auth_headers):
    for txn in ({"type": "gift", "amount": 1}, {"type": "income", "amount": -5}):
        r = await client.post(
            "/api/finance/transactions", json=txn, headers=auth_headers(farmer)
        )
        assert r.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
async def test_non_finite_amount_rejected(client, farmer, auth_headers, literal):
    headers = {**auth_headers(farmer), "Content-Type": "application/json"}
    r = await client.post(
        "/api/finance/transactions",
        content=f'{{"type": "income", "amount": {literal}}}',
        headers=headers,
    )
    assert r.status_code == 400

    data = (await client.get("/api/finance/report", headers=auth_headers(farmer))).json()
    assert data["totalIncome"] == 0
    assert data["balance"] == 0
    assert data["transactions"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["admin", "government", "analyst"])
async def test_finance_is_farmer_only(client, make_user, auth_headers, role):
    user = await make_user(role)
    r = await client.get("/api/finance/report", headers=auth_headers(user))
    assert r.status_code == 403

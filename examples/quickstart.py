#!/usr/bin/env python3
"""
GreenLands Quickstart — a farmer's first session in one script.

Registers a farmer → maps a parcel → records income and expenses →
reads the finance report and the land summary → opens a support ticket.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:5000
"""

import sys

from _common import BASE, check_backend, register


def main():
    check_backend()

    # ── Register ──────────────────────────────────────────────────
    print("\n1. Registering a farmer...")
    client, farmer = register(
        "farmer",
        location="North Valley",
        farmDetails={"totalLandArea": 12, "crops": ["Wheat"], "experience": 3},
    )
    print(f"   Farmer: {farmer['name']} ({farmer['id'][:8]}...)")

    # ── Map a parcel ──────────────────────────────────────────────
    print("\n2. Mapping a land parcel...")
    resp = client.post("/land", json={
        "name": "River Field",
        "area": 8.5,
        "crop": "Wheat",
        "soilType": "Loamy",
        "coordinates": [18.52, 73.85],
        "actualYield": 34,
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    land = resp.json()
    print(f"   Parcel: {land['name']}, {land['area']} acres ({land['areaInHectares']:.2f} ha)")
    print(f"   Yield per acre: {land['yieldPerAcre']:.1f}")

    # Out-of-range coordinates are rejected before anything is stored
    resp = client.post("/land", json={
        "name": "Nowhere", "area": 1, "crop": "Corn", "soilType": "Clay",
        "coordinates": [91, 0],
    })
    print(f"   Invalid coordinates → {resp.status_code}")

    # ── Crops ─────────────────────────────────────────────────────
    print("\n3. Adding crops...")
    for crop in ("Maize", "Maize"):
        resp = client.post(f"/farmers/{farmer['id']}/crops", json={"crop": crop})
        assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Crops: {', '.join(resp.json()['farmDetails']['crops'])}")

    # ── Ledger ────────────────────────────────────────────────────
    print("\n4. Recording transactions...")
    for txn in (
        {"type": "income", "amount": 2400, "category": "Harvest sale"},
        {"type": "expense", "amount": 650, "category": "Fertilizer"},
    ):
        resp = client.post("/finance/transactions", json=txn)
        assert resp.status_code == 201, f"Failed: {resp.text}"
        print(f"   {txn['type']:<8} {txn['amount']:>8.2f}  {txn['category']}")

    report = client.get("/finance/report").json()
    print(f"   Balance: {report['balance']:.2f}")

    # ── Summaries ─────────────────────────────────────────────────
    print("\n5. Land summary:")
    summary = client.get("/land/stats/summary").json()
    print(f"   {summary['totalRecords']} parcels, {summary['totalLandArea']} acres")

    # ── Support ───────────────────────────────────────────────────
    print("\n6. Opening a support ticket...")
    resp = client.post("/communication/support", json={
        "subject": "Map tiles",
        "message": "Satellite tiles do not load for my region.",
    })
    if resp.status_code != 200:
        print(f"   Failed: {resp.status_code} {resp.text}")
        sys.exit(1)
    print("   Ticket sent to the support desk.")

    print(f"\n✓ Quickstart finished against {BASE}.")


if __name__ == "__main__":
    main()

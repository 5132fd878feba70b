#!/usr/bin/env python3
"""
Analyst view — dashboard payloads and a custom report.

Registers an analyst, prints the overview, the six-month trends and a
crop performance report. Run quickstart.py first so there is data.
Run with: python examples/analyst_report.py
"""

from _common import check_backend, register


def main():
    check_backend()
    client, analyst = register("analyst")
    print(f"\nSigned in as {analyst['name']} ({analyst['role']})")

    overview = client.get("/analytics").json()
    print("\nOverview:")
    print(f"  Total land:     {overview['totalLand']} acres")
    print(f"  Active farmers: {overview['activeFarmers']}")
    print(f"  Average yield:  {overview['averageYield']:.2f}")
    for crop, count in overview["cropDistribution"].items():
        print(f"    {crop:<16} {count}")

    trends = client.get("/analytics/trends").json()
    print("\nLand growth (cumulative acres):")
    for point in trends["landGrowth"]:
        print(f"  {point['month']}  {point['value']}")

    resp = client.get("/analytics/reports", params={"type": "crop_performance"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print("\nCrop performance:")
    for row in resp.json()["data"]:
        print(f"  {row['_id']:<16} {row['count']} parcels  {row['totalArea']} acres")

    # Analysts cannot write land records
    resp = client.post("/land", json={
        "name": "Test", "area": 1, "crop": "Corn", "soilType": "Clay", "coordinates": [0, 0],
    })
    print(f"\nAnalyst creating land → {resp.status_code}")


if __name__ == "__main__":
    main()

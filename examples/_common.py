"""
Shared helpers for GreenLands examples.

Handles the health check and account registration so each example can
focus on its specific workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:5000/api"


def check_backend() -> None:
    """Verify the backend is reachable and healthy."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  greenlands init-db && greenlands serve")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")
    print(f"  Redis:    {'✓' if health['redis'] == 'ok' else '✗'}")

    if health["status"] != "OK":
        print("\nERROR: The database is not reachable. Check GREENLANDS_DATABASE_URL.")
        sys.exit(1)


def register(role: str = "farmer", **profile) -> tuple[httpx.Client, dict]:
    """Register a fresh account and return an authenticated client and the user.

    Uses a unique email per run so examples can be re-run.
    """
    run_id = uuid.uuid4().hex[:8]
    body = {
        "name": f"Demo {role.title()} {run_id}",
        "email": f"demo-{role}-{run_id}@example.com",
        "password": "demo-password-123",
        "role": role,
        **profile,
    }
    resp = httpx.post(f"{BASE}/auth/register", json=body, timeout=10)
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    data = resp.json()
    client = httpx.Client(
        base_url=BASE,
        timeout=10,
        headers={"Authorization": f"Bearer {data['token']}"},
    )
    return client, data["user"]

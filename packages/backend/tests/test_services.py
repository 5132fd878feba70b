"""Service-level tests for the pieces routes only touch indirectly:
password hashing, tokens, the audit log, mail and real-time fan-out.
"""

import asyncio
import smtplib

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from greenlands.auth.jwt import TokenError, create_access_token, verify_token
from greenlands.auth.password import hash_password, verify_password
from greenlands.config import settings
from greenlands.errors import DuplicateEmail
from greenlands.events.store import EventStore
from greenlands.events.types import LAND_CREATED, USER_REGISTERED
from greenlands.main import app
from greenlands.realtime import websocket as websocket_module
from greenlands.realtime.pubsub import SUPPORT_AUDIENCE, publish_event
from greenlands.services import mailer
from greenlands.services.identity_service import IdentityService
from greenlands.services.land_service import LandService


# ═══════════════════════════════════════════════════════════
# Passwords + tokens
# ═══════════════════════════════════════════════════════════


def test_password_hash_roundtrip():
    hashed = hash_password("secret123")
    assert hashed.startswith("$2b$")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_password_with_garbage_hash():
    assert verify_password("secret123", "not-a-hash") is False


def test_token_carries_subject_and_role():
    payload = verify_token(create_access_token("user-1", "analyst"))
    assert payload["sub"] == "user-1"
    assert payload["role"] == "analyst"
    assert payload["type"] == "access"


def test_tampered_token_rejected():
    header, _, signature = create_access_token("user-1", "farmer").split(".")
    _, admin_claims, _ = create_access_token("user-1", "admin").split(".")
    with pytest.raises(TokenError):
        verify_token(f"{header}.{admin_claims}.{signature}")


def test_expired_token_rejected():
    with pytest.raises(TokenError, match="expired"):
        verify_token(create_access_token("user-1", "farmer", expires_minutes=-5))


# ═══════════════════════════════════════════════════════════
# Audit log
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_registration_is_audited(db_session, farmer):
    events = await EventStore(db_session).read_stream(f"user:{farmer.id}")
    assert [e.type for e in events] == [USER_REGISTERED]
    assert events[0].data["role"] == "farmer"


@pytest.mark.asyncio
async def test_land_changes_are_audited_with_actor(db_session, farmer):
    land = await LandService(db_session).create_land(farmer.id, {
        "name": "Plot",
        "area": 1,
        "crop": "Rice",
        "soil_type": "Clay",
        "status": "Active",
        "coordinates": [1, 1],
    })
    events = await EventStore(db_session).read_stream(f"land:{land.id}")
    assert [e.type for e in events] == [LAND_CREATED]
    assert events[0].meta == {"actor_id": str(farmer.id)}


@pytest.mark.asyncio
async def test_read_stream_after_position(db_session):
    store = EventStore(db_session)
    first = await store.append("test:1", "a", {})
    await store.append("test:1", "b", {})
    await store.append("test:2", "c", {})

    events = await store.read_stream("test:1", after_id=first.id)
    assert [e.type for e in events] == ["b"]


# ═══════════════════════════════════════════════════════════
# Mail + real-time
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_mail_disabled_is_a_no_op():
    assert await mailer.send_mail("ops@example.com", "Hi", "Body") is False


@pytest.mark.asyncio
async def test_mail_failure_is_reported_not_raised(monkeypatch):
    def refuse(message):
        raise smtplib.SMTPConnectError(421, "unavailable")

    monkeypatch.setattr(settings, "mail_enabled", True)
    monkeypatch.setattr(mailer, "_send", refuse)
    assert await mailer.send_mail("ops@example.com", "Hi", "Body") is False


@pytest.mark.asyncio
async def test_mail_sent(monkeypatch):
    sent = []
    monkeypatch.setattr(settings, "mail_enabled", True)
    monkeypatch.setattr(settings, "mail_from", "noreply@example.com")
    monkeypatch.setattr(mailer, "_send", sent.append)

    assert await mailer.send_mail("ops@example.com", "New Support Request: Hi", "Body") is True
    assert sent[0]["To"] == "ops@example.com"
    assert sent[0]["Subject"] == "New Support Request: Hi"


@pytest.mark.asyncio
async def test_publish_without_redis_returns_false():
    assert await publish_event(SUPPORT_AUDIENCE, "support:new", {"id": "x"}) is False


def test_websocket_requires_token():
    client = TestClient(app)
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/ws/notifications"):
            pass
    assert exc.value.code == 4001


class _BrokenPubSub:
    async def listen(self):
        raise ConnectionError("redis connection lost")
        yield  # pragma: no cover


class _IdleSocket:
    async def receive_text(self):
        await asyncio.sleep(3600)

    async def send_text(self, text):
        pass


@pytest.mark.asyncio
async def test_relay_failure_is_collected_and_pinger_stopped():
    failures = await websocket_module._pump(_BrokenPubSub(), _IdleSocket())
    assert [type(f) for f in failures] == [ConnectionError]
    assert str(failures[0]) == "redis connection lost"


# ═══════════════════════════════════════════════════════════
# Registration race
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_email_taken_between_check_and_insert(db_session, farmer, monkeypatch):
    """The unique index is the last word when the pre-check misses a rival."""
    farmer_id, email = farmer.id, farmer.email
    service = IdentityService(db_session)

    async def _not_found(email):
        return None

    monkeypatch.setattr(service, "get_by_email", _not_found)
    with pytest.raises(DuplicateEmail):
        await service.create_user(
            name="Second Asha", email=email, password="secret123"
        )

    # Session is usable again and the first account is untouched.
    monkeypatch.undo()
    existing = await IdentityService(db_session).get_by_email(email)
    assert existing.id == farmer_id

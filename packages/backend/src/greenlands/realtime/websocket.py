"""Live support-ticket feed for the admin support desk.

Clients open ``/ws/notifications?token=<jwt>``. Only roles allowed to
manage support tickets are admitted; everyone else gets a 4xxx close code
before the socket is accepted. Admitted clients receive every
``support:new`` message published on the support channel and may send
``{"type": "ping"}`` to keep the connection warm.
"""

import asyncio
import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from greenlands.auth.dependencies import CurrentIdentity, resolve_token
from greenlands.auth.policy import API_POLICY, Decision, authorize
from greenlands.db.engine import async_session_factory
from greenlands.errors import AppError
from greenlands.realtime.pubsub import SUPPORT_AUDIENCE, channel_for, get_redis

logger = structlog.get_logger()
router = APIRouter()

CLOSE_UNAUTHENTICATED = 4001
CLOSE_FORBIDDEN = 4003
CLOSE_UNAVAILABLE = 1011


async def _admit(websocket: WebSocket) -> CurrentIdentity | None:
    """Resolve the query-string token to a support-desk identity, or close."""
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=CLOSE_UNAUTHENTICATED, reason="Authentication required")
        return None

    try:
        async with async_session_factory() as db:
            identity = await resolve_token(token, db)
    except AppError:
        await websocket.close(code=CLOSE_UNAUTHENTICATED, reason="Invalid or expired token")
        return None

    if authorize(identity.role, API_POLICY["support.manage"]) is Decision.DENY:
        await websocket.close(code=CLOSE_FORBIDDEN, reason="Forbidden")
        return None
    return identity


async def _relay_published(pubsub, websocket: WebSocket):
    async for message in pubsub.listen():
        if message["type"] == "message":
            await websocket.send_text(message["data"])


async def _answer_pings(websocket: WebSocket):
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if isinstance(frame, dict) and frame.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
    except WebSocketDisconnect:
        return


async def _pump(pubsub, websocket: WebSocket) -> list[Exception]:
    """Run both directions until either ends; return what they raised."""
    tasks = [
        asyncio.create_task(_relay_published(pubsub, websocket)),
        asyncio.create_task(_answer_pings(websocket)),
    ]
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
    return [r for r in results if isinstance(r, Exception)]


@router.websocket("/ws/notifications")
async def notifications_websocket(websocket: WebSocket):
    identity = await _admit(websocket)
    if identity is None:
        return

    try:
        redis = get_redis()
    except RuntimeError:
        await websocket.close(code=CLOSE_UNAVAILABLE, reason="Real-time events unavailable")
        return

    await websocket.accept()
    logger.info("realtime.client_connected", user_id=identity.user_id, role=identity.role)

    channel = channel_for(SUPPORT_AUDIENCE)
    pubsub = redis.pubsub()
    await pubsub.subscribe(channel)

    try:
        for failure in await _pump(pubsub, websocket):
            logger.warning("realtime.relay_failed", user_id=identity.user_id, error=str(failure))
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.aclose()
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()
        logger.info("realtime.client_disconnected", user_id=identity.user_id)

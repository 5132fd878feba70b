"""GreenLands ASGI application.

``uvicorn greenlands.main:app`` serves the module-level instance; tests
and tooling call :func:`create_app` for a fresh one.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from greenlands import __version__
from greenlands.api import api_router
from greenlands.config import settings
from greenlands.db.engine import engine
from greenlands.errors import install_exception_handlers
from greenlands.middleware.rate_limit import RateLimitMiddleware
from greenlands.middleware.request_id import RequestIdMiddleware
from greenlands.middleware.security import SecurityHeadersMiddleware
from greenlands.realtime import pubsub
from greenlands.realtime.websocket import router as ws_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "greenlands.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    try:
        await pubsub.init_redis()
    except Exception as e:
        # Without Redis the API still serves; rate limits and live alerts are off.
        logger.warning("greenlands.redis_unavailable", url=settings.redis_url, error=str(e))
    else:
        logger.info("greenlands.redis_connected", url=settings.redis_url)

    yield

    logger.info("greenlands.shutdown")
    await pubsub.close_redis()
    await engine.dispose()


def _install_middleware(app: FastAPI) -> None:
    # Added innermost first: a request passes CORS, RateLimit, Security, RequestId.
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="GreenLands API",
        description="Agricultural land management for farmers, officials and analysts",
        version=__version__,
        lifespan=lifespan,
    )
    _install_middleware(app)
    install_exception_handlers(app)
    app.include_router(api_router)
    app.include_router(ws_router)
    return app


app = create_app()

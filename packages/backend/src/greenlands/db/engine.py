"""Database engine, session factory and the ``get_db`` request dependency.

Postgres (asyncpg) in deployments, SQLite (aiosqlite) for tests and demos.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from greenlands.config import settings


def _pool_kwargs(url: str) -> dict:
    # aiosqlite manages its own connection; pool sizing only applies to Postgres.
    if url.startswith("sqlite"):
        return {}
    return {"pool_size": 5, "max_overflow": 15, "pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_pool_kwargs(settings.database_url),
)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """One session per request, closed when the response is done."""
    async with async_session_factory() as session:
        yield session

"""Async SQLAlchemy engine and session factory.

Production uses psycopg3 which supports both sync and async with the same
``postgresql+psycopg://`` URL (Supabase exposes a plain Postgres endpoint).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def create_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create an async SQLAlchemy engine with small-service pool settings.

    - **pool_size=5**: baseline connections kept open.
    - **max_overflow=5**: burst capacity above pool_size.
    - **pool_pre_ping=True**: test connections before checkout to handle
      server-side disconnects (PG restarts, idle timeouts).
    - **pool_recycle=1800**: hosted Postgres poolers drop idle connections
      well before an hour.

    All defaults can be overridden via *kwargs*.  SQLite URLs skip the pool
    sizing arguments, which its pool class does not accept.
    """
    defaults: dict[str, object] = {"echo": False, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        defaults.update(pool_size=5, max_overflow=5, pool_recycle=1800)
    defaults.update(kwargs)
    return create_async_engine(database_url, **defaults)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    ``expire_on_commit=False`` so that ORM instances remain usable after
    commit without triggering lazy loads (important for async code where
    implicit IO is forbidden).
    """
    return async_sessionmaker(engine, expire_on_commit=False)

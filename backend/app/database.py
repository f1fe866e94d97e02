"""
EstateHub Backend — Database Session Management
=================================================

What:  The process-wide async SQLAlchemy engine, session factory and the
       FastAPI session dependency.
How:   A single `Database` object owns the engine. It is created lazily on
       first use (or explicitly by the lifespan handler) and disposed on
       shutdown. Each request gets its own AsyncSession that commits on
       success and rolls back on error.

Connection pooling:
    PostgreSQL uses a queue pool sized from settings (pool_size + max_overflow).
    SQLite (tests, local hacking) skips pool sizing; in-memory databases use a
    StaticPool so every session sees the same connection.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models (and Alembic's metadata)."""
    pass


def _engine_options(url: str) -> Dict[str, Any]:
    """Builds create_async_engine kwargs appropriate for the URL's backend."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}

    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
        return options

    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


class Database:
    """
    Lazily-initialized handle to the datastore.

    Lifecycle:
        init():    create the engine and session factory (idempotent)
        dispose(): close pooled connections and forget the engine

    Accessing `engine` or `session_factory` before init() initializes with
    the configured DATABASE_URL.
    """

    def __init__(self) -> None:
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def init(self, url: Optional[str] = None, **engine_kwargs: Any) -> AsyncEngine:
        """
        Create the engine if it does not exist yet.

        Args:
            url: Overrides settings.database_url (tests pass an in-memory SQLite URL).
            engine_kwargs: Extra create_async_engine options, merged over the defaults.
        """
        if self._engine is not None:
            return self._engine

        url = url or settings.database_url
        options = _engine_options(url)
        options.update(engine_kwargs)

        self._engine = create_async_engine(url, **options)
        # expire_on_commit=False: response models are built from objects after commit
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database engine initialized (%s)", self._engine.url.render_as_string(hide_password=True))
        return self._engine

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self.init()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self.init()
        return self._session_factory

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata (no-op for existing tables)."""
        # Register models on the metadata before creating
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def dispose(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")


db = Database()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Commits when the handler returns normally and rolls back when it raises,
    then re-raises so the global exception handlers can respond.

    Example:
        @router.get("/residency/allresd")
        async def list_residencies(session: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with db.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Close all pooled connections. Called from the lifespan shutdown phase."""
    await db.dispose()

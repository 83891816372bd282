"""
Storage backends and the process-wide database handle.

``Database`` owns the async engine and session factory. It is built once in
the application lifespan and passed to every store; nothing else holds a
connection pool. The backend adapter (SQLite or PostgreSQL) is chosen from the
URL scheme and only differs in URL normalization, engine options and how a
unique-constraint violation is recognized.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import wraps

from sqlalchemy import event, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import DateTime, TypeDecorator

from tasktracker.config import Settings
from tasktracker.exceptions import AppError, InternalError
from tasktracker.utils.logger import setup_logger

logger = setup_logger(__name__)

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime column; naive values read back are UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        # SQLite stores no offset, so everything is written as UTC
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Backends ────────────────────────────────────────────

class StorageBackend:
    name = "base"
    schemes: tuple[str, ...] = ()

    def normalize_url(self, url: str) -> str:
        raise NotImplementedError

    def engine_options(self, settings: Settings) -> dict:
        return {}

    def configure_engine(self, engine) -> None:
        """Hook for per-connection setup."""

    def is_unique_violation(self, exc: IntegrityError) -> bool:
        raise NotImplementedError


class SQLiteBackend(StorageBackend):
    """Embedded file-backed engine (aiosqlite)."""

    name = "sqlite"
    schemes = ("sqlite",)

    def normalize_url(self, url: str) -> str:
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    def engine_options(self, settings: Settings) -> dict:
        return {"connect_args": {"timeout": settings.DB_TIMEOUT}}

    def configure_engine(self, engine) -> None:
        # SQLite ignores ON DELETE CASCADE unless enabled on every connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    def is_unique_violation(self, exc: IntegrityError) -> bool:
        return "UNIQUE constraint failed" in str(exc.orig)


class PostgresBackend(StorageBackend):
    """Networked relational engine (asyncpg)."""

    name = "postgresql"
    schemes = ("postgresql", "postgres")
    UNIQUE_VIOLATION = "23505"

    def normalize_url(self, url: str) -> str:
        for prefix in ("postgresql://", "postgres://"):
            if url.startswith(prefix):
                return url.replace(prefix, "postgresql+asyncpg://", 1)
        return url

    def engine_options(self, settings: Settings) -> dict:
        connect_args = {"timeout": settings.DB_TIMEOUT}
        if settings.DATABASE_SSL:
            connect_args["ssl"] = "require"
        return {
            "pool_pre_ping": True,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_TIMEOUT,
            "pool_recycle": 300,
            "connect_args": connect_args,
        }

    def is_unique_violation(self, exc: IntegrityError) -> bool:
        orig = exc.orig
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if sqlstate is None and orig is not None:
            sqlstate = getattr(orig.__cause__, "sqlstate", None)
        return sqlstate == self.UNIQUE_VIOLATION


BACKENDS: tuple[StorageBackend, ...] = (SQLiteBackend(), PostgresBackend())


def backend_for_url(url: str) -> StorageBackend:
    scheme = url.split(":", 1)[0].split("+", 1)[0].lower()
    for backend in BACKENDS:
        if scheme in backend.schemes:
            return backend
    raise ValueError(f"Unsupported DATABASE_URL scheme: {scheme!r}")


# ── Handle ──────────────────────────────────────────────

class Database:
    def __init__(self, url: str, backend: StorageBackend, **engine_options):
        self.backend = backend
        self.url = backend.normalize_url(url)
        self.engine = create_async_engine(self.url, echo=False, **engine_options)
        backend.configure_engine(self.engine)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        backend = backend_for_url(settings.DATABASE_URL)
        logger.info(f"Using {backend.name} storage backend")
        return cls(settings.DATABASE_URL, backend, **backend.engine_options(settings))

    @asynccontextmanager
    async def session(self):
        async with self.session_factory() as db:
            yield db

    async def create_all(self) -> None:
        # Register every table on Base.metadata before creating them
        from tasktracker import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                return result.scalar() == 1
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    def is_unique_violation(self, exc: IntegrityError) -> bool:
        return self.backend.is_unique_violation(exc)

    async def dispose(self) -> None:
        await self.engine.dispose()


def translate_store_errors(func):
    """Turn unexpected SQLAlchemy failures in a store method into InternalError."""

    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except AppError:
            raise
        except SQLAlchemyError as e:
            logger.error(
                f"Store operation {type(self).__name__}.{func.__name__} failed: {e}",
                exc_info=True,
            )
            raise InternalError() from e

    return wrapper

"""Database Session Manager — bounded async connection pool with failure classification.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Every store failure leaves this module as PersistenceError with a FailureKind
    - Pool is bounded: pool_size + max_overflow connections, callers wait up to
      pool_timeout seconds for a free one
    - TLS to the store whenever ssl_enabled is set

Design Decisions:
    - Constructed explicitly in the FastAPI lifespan and stored on app.state;
      there is no module-level instance
    - SQLite URLs skip pool sizing and TLS (tests run on aiosqlite in memory)
"""

import asyncio
import logging
import ssl
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    DisconnectionError, IntegrityError, InterfaceError, OperationalError,
    SQLAlchemyError, TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from account_service.core.domain_types import FailureKind
from account_service.core.errors import PersistenceError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"
MYSQL_DUPLICATE_ENTRY = 1062

_TRANSIENT_ERRORS = (
    OperationalError, InterfaceError, PoolTimeoutError, DisconnectionError,
)

_FAILURE_MESSAGES = {
    FailureKind.CONFLICT: "Unique constraint violated",
    FailureKind.TRANSIENT: "Connection or operational error",
    FailureKind.FATAL: "Database operation failed",
}


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver reports a duplicate key (PostgreSQL, MySQL or SQLite)."""
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True
    return "UNIQUE constraint failed" in str(orig)


def classify_failure(exc: BaseException) -> FailureKind:
    """Map a driver/pool exception onto conflict, transient or fatal."""
    if isinstance(exc, IntegrityError):
        return FailureKind.CONFLICT if is_unique_violation(exc) else FailureKind.FATAL
    if isinstance(exc, _TRANSIENT_ERRORS):
        return FailureKind.TRANSIENT
    if isinstance(exc, (OSError, asyncio.TimeoutError)):
        return FailureKind.TRANSIENT
    return FailureKind.FATAL


def build_engine_options(
    database_url: str,
    pool_size: int,
    max_overflow: int,
    pool_timeout: float,
    ssl_enabled: bool,
) -> dict:
    """Engine keyword arguments for the given store URL."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {}
    options = {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    if ssl_enabled:
        options["connect_args"] = {"ssl": ssl.create_default_context()}
    return options


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_timeout: float = 30,
        ssl_enabled: bool = False,
    ):
        self.engine = create_async_engine(
            database_url,
            **build_engine_options(
                database_url, pool_size, max_overflow, pool_timeout, ssl_enabled,
            ),
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(
        self, operation: str = "query",
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback and failure classification."""
        session = self._session_factory()
        try:
            yield session
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            await session.rollback()
            kind = classify_failure(e)
            log = logger.warning if kind is FailureKind.CONFLICT else logger.error
            log(
                f"DB {operation} error: {type(e).__name__}: {e}",
                extra={"failure_kind": kind.value, "operation": operation},
            )
            raise PersistenceError(_FAILURE_MESSAGES[kind], operation, kind) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session("ping") as db:
                await db.execute(text("SELECT 1"))
            return True
        except PersistenceError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()

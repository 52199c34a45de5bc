"""Database Session Manager — failure classification, engine options, session translation.

Invariants:
    - Unique/primary-key violations classify as conflict on every supported driver
    - Connectivity and pool-timeout errors classify as transient
    - Everything else classifies as fatal
    - Errors inside session() leave as PersistenceError with the original as __cause__
    - A full pool makes callers wait; running out of pool_timeout is transient
"""

import asyncio
import ssl

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool
from sqlalchemy.exc import (
    IntegrityError, OperationalError, ProgrammingError,
    TimeoutError as PoolTimeoutError,
)

from account_service.core.domain_types import FailureKind
from account_service.core.errors import PersistenceError
from account_service.infrastructure.database import (
    DatabaseSessionManager, build_engine_options, classify_failure,
)


class _PgUniqueViolation(Exception):
    sqlstate = "23505"


class _PgNotNullViolation(Exception):
    sqlstate = "23502"


def _integrity(orig):
    return IntegrityError("INSERT INTO users ...", {}, orig)


# -- classify_failure ----------------------------------------------------------

def test_postgres_unique_violation_is_conflict():
    exc = _integrity(_PgUniqueViolation("duplicate key value"))
    assert classify_failure(exc) is FailureKind.CONFLICT


def test_mysql_duplicate_entry_is_conflict():
    exc = _integrity(Exception(1062, "Duplicate entry 'alice' for key 'username'"))
    assert classify_failure(exc) is FailureKind.CONFLICT


def test_sqlite_unique_constraint_is_conflict():
    exc = _integrity(Exception("UNIQUE constraint failed: users.username"))
    assert classify_failure(exc) is FailureKind.CONFLICT


def test_other_integrity_error_is_fatal():
    exc = _integrity(_PgNotNullViolation("null value in column"))
    assert classify_failure(exc) is FailureKind.FATAL


@pytest.mark.parametrize("exc", [
    OperationalError("SELECT 1", {}, Exception("server closed the connection")),
    PoolTimeoutError("QueuePool limit of size 10 overflow 0 reached"),
    ConnectionRefusedError("connection refused"),
])
def test_connectivity_errors_are_transient(exc):
    assert classify_failure(exc) is FailureKind.TRANSIENT


@pytest.mark.parametrize("exc", [
    ProgrammingError("SELECT", {}, Exception("syntax error")),
    ValueError("unexpected"),
])
def test_unknown_errors_are_fatal(exc):
    assert classify_failure(exc) is FailureKind.FATAL


# -- build_engine_options ------------------------------------------------------

def test_sqlite_url_gets_no_pool_options():
    assert build_engine_options("sqlite+aiosqlite:///:memory:", 10, 0, 30, True) == {}


def test_postgres_url_gets_bounded_pool_with_tls():
    options = build_engine_options(
        "postgresql+asyncpg://u:p@db:5432/accounts", 10, 0, 30, True,
    )
    assert options["pool_size"] == 10
    assert options["max_overflow"] == 0
    assert options["pool_timeout"] == 30
    assert options["pool_pre_ping"] is True
    assert isinstance(options["connect_args"]["ssl"], ssl.SSLContext)


def test_tls_disabled_omits_connect_args():
    options = build_engine_options(
        "postgresql+asyncpg://u:p@db:5432/accounts", 5, 2, 10, False,
    )
    assert "connect_args" not in options


# -- DatabaseSessionManager ----------------------------------------------------

async def test_session_translates_operational_error(db_manager):
    with pytest.raises(PersistenceError) as info:
        async with db_manager.session("select") as session:
            await session.execute(text("SELECT * FROM no_such_table"))

    assert info.value.kind is FailureKind.TRANSIENT
    assert info.value.operation == "select"
    assert isinstance(info.value.__cause__, OperationalError)


async def test_session_leaves_unrelated_errors_alone(db_manager):
    with pytest.raises(KeyError):
        async with db_manager.session():
            raise KeyError("not a store error")


async def test_health_check_true_for_reachable_store(db_manager):
    assert await db_manager.health_check() is True


async def test_health_check_false_after_failure(db_manager, monkeypatch):
    async def _broken_execute(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("gone"))

    monkeypatch.setattr(
        "sqlalchemy.ext.asyncio.AsyncSession.execute", _broken_execute,
    )
    assert await db_manager.health_check() is False


async def test_dispose_is_safe_to_call_twice():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.dispose()
    await manager.dispose()


# -- Bounded pool --------------------------------------------------------------

def _single_connection_manager(tmp_path, pool_timeout):
    """Manager over a file store whose pool holds exactly one connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'pool.db'}",
        poolclass=AsyncAdaptedQueuePool,
        pool_size=1,
        max_overflow=0,
        pool_timeout=pool_timeout,
    )
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = engine
    manager._session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
    return manager


async def test_second_session_waits_for_the_only_connection(tmp_path):
    manager = _single_connection_manager(tmp_path, pool_timeout=5)

    async def _second_select():
        async with manager.session("select") as db:
            return (await db.execute(text("SELECT 1"))).scalar()

    async with manager.session("select") as db:
        await db.execute(text("SELECT 1"))
        waiting = asyncio.create_task(_second_select())
        await asyncio.sleep(0.2)
        assert not waiting.done()

    assert await asyncio.wait_for(waiting, timeout=5) == 1
    await manager.dispose()


async def test_pool_timeout_is_transient(tmp_path):
    manager = _single_connection_manager(tmp_path, pool_timeout=0.2)

    async with manager.session("select") as db:
        await db.execute(text("SELECT 1"))
        with pytest.raises(PersistenceError) as info:
            async with manager.session("insert") as other:
                await other.execute(text("SELECT 1"))

    assert info.value.kind is FailureKind.TRANSIENT
    assert isinstance(info.value.__cause__, PoolTimeoutError)
    await manager.dispose()

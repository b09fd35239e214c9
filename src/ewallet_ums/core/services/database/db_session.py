"""Database engine lifecycle: one pooled async engine per process."""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy import event, exc, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from ewallet_ums.core.errors import DatabaseConnectionError
from ewallet_ums.core.services.database.db_migrate import run_migrations
from ewallet_ums.runtime.config.config_data import DatabaseConfig

_CHECKED_IN_AT = "ewallet_ums_checked_in_at"


class DatabaseService:
    """Owns the shared connection pool.

    ``init()`` runs at most once successfully; concurrent callers wait for the
    first one and observe the same outcome. Repositories borrow a connection
    per call through ``connect()`` or ``begin()``.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: AsyncEngine | None = None
        self._init_lock = asyncio.Lock()
        self._init_error: DatabaseConnectionError | None = None
        self._closed = False

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def init(self) -> None:
        """Create the pool, apply pending migrations and verify connectivity."""
        async with self._init_lock:
            if self._engine is not None:
                return
            if self._init_error is not None:
                raise self._init_error
            if self._closed:
                raise DatabaseConnectionError("database service is closed")

            try:
                self._engine = await self._open()
            except DatabaseConnectionError as e:
                self._init_error = e
                raise
            except Exception as e:
                logger.error("Failed to initialize database: {}", e)
                self._init_error = DatabaseConnectionError(
                    f"failed to initialize database: {e}"
                )
                raise self._init_error from e

        logger.info("Successfully connected to database")

    async def _open(self) -> AsyncEngine:
        logger.info("Setting up database engine")
        engine = create_async_engine(
            self._config.connection_string, **self._engine_kwargs()
        )
        if self._config.is_postgres:
            self._expire_idle_connections(engine, self._config.conn_max_idle_time)

        try:
            await run_migrations(engine, Path(self._config.migrations_dir))
            await self._ping(engine, self._config.ping_timeout)
        except BaseException:
            await engine.dispose()
            raise
        return engine

    def _engine_kwargs(self) -> dict[str, Any]:
        cfg = self._config
        kwargs: dict[str, Any] = {"echo": False, "pool_pre_ping": True}

        # SQLite (tests, local tooling) keeps the driver's default pool
        if cfg.is_postgres:
            kwargs.update(
                {
                    "pool_size": cfg.max_idle_conns,
                    "max_overflow": cfg.max_open_conns - cfg.max_idle_conns,
                    "pool_recycle": cfg.conn_max_lifetime,
                    "pool_timeout": cfg.pool_timeout,
                    "connect_args": {
                        "timeout": cfg.ping_timeout,
                        "server_settings": {"application_name": "ewallet-ums"},
                    },
                }
            )
        return kwargs

    @staticmethod
    def _expire_idle_connections(engine: AsyncEngine, max_idle: float) -> None:
        """Discard pooled connections that sat idle longer than ``max_idle``."""

        @event.listens_for(engine.sync_engine, "checkin")
        def _stamp(dbapi_connection, connection_record) -> None:
            connection_record.info[_CHECKED_IN_AT] = time.monotonic()

        @event.listens_for(engine.sync_engine, "checkout")
        def _check_idle(dbapi_connection, connection_record, connection_proxy) -> None:
            checked_in_at = connection_record.info.pop(_CHECKED_IN_AT, None)
            if checked_in_at is not None and time.monotonic() - checked_in_at > max_idle:
                # The pool invalidates this connection and retries with a fresh one
                raise exc.DisconnectionError("connection exceeded maximum idle time")

    @staticmethod
    async def _ping(engine: AsyncEngine, timeout: float) -> None:
        async def _select_one() -> None:
            async with engine.connect() as connection:
                await connection.execute(text("SELECT 1"))

        try:
            await asyncio.wait_for(_select_one(), timeout)
        except TimeoutError as e:
            raise DatabaseConnectionError(
                f"database ping timed out after {timeout}s"
            ) from e
        except Exception as e:
            raise DatabaseConnectionError(f"database ping failed: {e}") from e

    async def probe(self, timeout: float) -> None:
        """Round-trip to the store; raises DatabaseConnectionError when unhealthy."""
        engine = self._engine
        if engine is None:
            raise DatabaseConnectionError("database connection is not initialized")
        try:
            await self._ping(engine, timeout)
        except DatabaseConnectionError as e:
            logger.error("Database health check failed: {}", e)
            raise

    async def close(self) -> None:
        """Release every pooled connection; safe when init() never succeeded."""
        self._closed = True
        engine, self._engine = self._engine, None
        if engine is None:
            return
        logger.info("Closing database connection pool")
        await engine.dispose()

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseConnectionError("database connection is not initialized")
        return self._engine

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AsyncConnection]:
        """Borrow a connection for read-only statements."""
        async with self._require_engine().connect() as connection:
            yield connection

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[AsyncConnection]:
        """Borrow a connection inside a transaction committed on exit."""
        async with self._require_engine().begin() as connection:
            yield connection

    def get_pool_status(self) -> dict[str, int]:
        """Get current connection pool status for monitoring."""
        if self._engine is None:
            return {}
        pool = self._engine.pool
        return {
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        }

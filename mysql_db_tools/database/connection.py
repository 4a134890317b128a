"""
Database connection management module.

This module handles connection pool creation, connection retrieval and
release, single statement execution, the transaction wrapper, and pool
shutdown for the MySQL tools package.
"""

import asyncio
import logging
import signal
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from mysql.connector.aio import MySQLConnectionPool

from ..config import Env
from ..models import DatabaseConfig, OperationResult
from ..utils.text import truncate_sql
from .config import create_database_config, connection_kwargs
from .errors import DRIVER_ERRORS

logger = logging.getLogger(__name__)

Rows = List[Dict[str, Any]]
QueryResult = Union[Rows, OperationResult]

_DEFAULT_MANAGER: Optional["ConnectionManager"] = None


class ManagerState(str, Enum):
    """Lifecycle of a ConnectionManager."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    POOLED = "pooled"
    CLOSED = "closed"


async def create_db_connection_pool(config: DatabaseConfig) -> MySQLConnectionPool:
    """
    Create and open a database connection pool.

    Args:
        config: Database configuration settings

    Returns:
        An initialized connection pool

    Raises:
        mysql.connector.Error: If the pool cannot open its connections
    """
    logger.info(
        f"Creating MySQL connection pool (host={config.host}:{config.port}, size={config.pool_size})"
    )

    pool = MySQLConnectionPool(pool_size=config.pool_size, **connection_kwargs(config))
    try:
        await pool.initialize_pool()
    except BaseException:
        # Connections opened before the failure are already queued in the pool
        await close_db_connection_pool(pool)
        raise

    logger.info("MySQL connection pool created successfully")
    return pool


async def close_db_connection_pool(pool: Optional[MySQLConnectionPool]) -> None:
    """
    Close the database connection pool.

    Args:
        pool: Database connection pool to close
    """
    if pool is None:
        logger.debug("Connection pool is None, nothing to close")
        return

    try:
        logger.info("Closing MySQL connection pool")
        closed = await pool.close_pool()
        logger.info(f"MySQL connection pool closed ({closed} connections)")

    except DRIVER_ERRORS as e:
        logger.error(f"Error closing MySQL connection pool: {str(e)}")


async def _run_statement(connection, sql: str, params: Sequence[Any]) -> QueryResult:
    """Run one statement on an already-acquired connection."""
    cursor = await connection.cursor(dictionary=True)
    try:
        await cursor.execute(sql, tuple(params))
        if cursor.description:
            return list(await cursor.fetchall())
        return OperationResult(
            affected_rows=max(cursor.rowcount or 0, 0),
            insert_id=cursor.lastrowid or 0,
            warning_count=cursor.warning_count or 0,
        )
    finally:
        await cursor.close()


class Transaction:
    """Statement runner bound to the connection held by run_transaction."""

    def __init__(self, connection):
        self._connection = connection
        self.active = True

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        if not self.active:
            raise RuntimeError("Transaction has already finished")
        logger.debug(f"Executing query in transaction: {truncate_sql(sql)}")
        return await _run_statement(self._connection, sql, params or ())


class ConnectionManager:
    """
    Owner of the lazily-created connection pool for one MySQL endpoint.

    The pool is created on first use and can be closed with shutdown();
    the next statement after a shutdown creates a fresh pool.
    """

    def __init__(
        self,
        config: Optional[DatabaseConfig] = None,
        env_loader: Callable[[], Env] = Env.load,
    ):
        self._config = config
        self._env_loader = env_loader
        self._pool: Optional[MySQLConnectionPool] = None
        self._slots: Optional[asyncio.Semaphore] = None
        self._pool_lock = asyncio.Lock()
        self._closed = False
        self._shutdown_task: Optional[asyncio.Task] = None

    @property
    def config(self) -> Optional[DatabaseConfig]:
        return self._config

    @property
    def pool(self) -> Optional[MySQLConnectionPool]:
        return self._pool

    @property
    def state(self) -> ManagerState:
        if self._pool is not None:
            return ManagerState.POOLED
        if self._closed:
            return ManagerState.CLOSED
        if self._config is not None:
            return ManagerState.CONFIGURED
        return ManagerState.UNCONFIGURED

    def configure(self) -> DatabaseConfig:
        """
        Read the configuration once.

        Raises:
            ConfigError: If a required variable is missing; nothing is retried
        """
        if self._config is None:
            self._config = create_database_config(self._env_loader())
            logger.info(
                f"MySQL client configured for {self._config.user}@{self._config.host}:{self._config.port}"
            )
        return self._config

    async def _ensure_pool(self) -> MySQLConnectionPool:
        config = self.configure()
        async with self._pool_lock:
            if self._pool is None:
                self._pool = await create_db_connection_pool(config)
                self._slots = asyncio.Semaphore(config.pool_size)
                self._closed = False
            return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Any]:
        """
        Yield a pooled connection and always give it back.

        Callers beyond the pool capacity wait for a release, for at most
        ``acquire_timeout`` seconds.
        """
        pool = await self._ensure_pool()
        slots = self._slots
        await asyncio.wait_for(slots.acquire(), timeout=self._config.acquire_timeout)
        try:
            connection = await pool.get_connection()
        except BaseException:
            slots.release()
            raise
        logger.debug("Retrieved database connection from pool")

        try:
            yield connection
        finally:
            try:
                await connection.close()
                logger.debug("Returned database connection to pool")
                if pool is not self._pool:
                    # Pool was shut down while this connection was checked out
                    await close_db_connection_pool(pool)
            finally:
                slots.release()

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        """
        Run one statement with driver-side parameter substitution.

        Returns:
            Row dicts for statements that produce a result set, otherwise
            an OperationResult
        """
        async with self.acquire() as connection:
            logger.debug(f"Executing query: {truncate_sql(sql)}")
            result = await _run_statement(connection, sql, params or ())
            logger.debug("Query executed successfully")
            return result

    async def run_transaction(self, body: Callable[[Transaction], Awaitable[Any]]) -> Any:
        """
        Run ``body`` inside BEGIN ... COMMIT on a single connection.

        Any exception from ``body`` rolls the transaction back and is
        re-raised. The connection is released in every case. Driver errors
        surface unwrapped; operations.run_in_transaction converts them into
        OperationError.
        """
        async with self.acquire() as connection:
            await connection.start_transaction()
            transaction = Transaction(connection)
            try:
                result = await body(transaction)
            except BaseException:
                logger.warning("Transaction failed, rolling back")
                await connection.rollback()
                raise
            else:
                await connection.commit()
                logger.debug("Transaction committed")
                return result
            finally:
                transaction.active = False

    async def test_connection(self) -> bool:
        """Run ``SELECT 1`` and report whether the server answered."""
        try:
            await self.execute("SELECT 1 AS test")
        except DRIVER_ERRORS as e:
            logger.error(f"MySQL connection test failed: {str(e)}")
            return False
        logger.info("MySQL connection test successful")
        return True

    async def shutdown(self) -> None:
        """Close the pool. Calling it again is a no-op."""
        pool, self._pool = self._pool, None
        self._slots = None
        if pool is None:
            logger.debug("No open connection pool to shut down")
            return
        self._closed = True
        await close_db_connection_pool(pool)

    def request_shutdown(self, reason: str = "shutdown requested") -> asyncio.Task:
        """Schedule shutdown() on the running loop without waiting for it."""
        logger.info(f"{reason}, closing MySQL connections...")
        self._shutdown_task = asyncio.ensure_future(self.shutdown())
        return self._shutdown_task


def install_signal_handlers(
    manager: ConnectionManager,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> None:
    """
    Close the pool on SIGINT/SIGTERM.

    In-flight statements are neither awaited nor cancelled.
    """
    loop = loop or asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, manager.request_shutdown, f"Received {sig.name}")


def get_default_manager() -> ConnectionManager:
    """Return the process-wide ConnectionManager, creating it on first call."""
    global _DEFAULT_MANAGER
    if _DEFAULT_MANAGER is None:
        _DEFAULT_MANAGER = ConnectionManager()
    return _DEFAULT_MANAGER


def reset_default_manager() -> None:
    """Forget the process-wide ConnectionManager (its pool is not closed)."""
    global _DEFAULT_MANAGER
    _DEFAULT_MANAGER = None

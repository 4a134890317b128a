#!/usr/bin/env python3
"""
Tests for the connection manager.

Covers lazy configuration and pool creation, connection release, the
transaction wrapper, capacity waits, shutdown and signal handling.
"""

import asyncio
import os
import signal
import sys
import unittest
from unittest.mock import MagicMock, patch

from mysql.connector.errors import InterfaceError

# Add the tests directory to the path so we can import helpers
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from helpers.fake_mysql import FakePool, FakeServer, fake_pool_factory

from mysql_db_tools.config import ConfigError, Env
from mysql_db_tools.database import (
    ConnectionManager,
    ManagerState,
    install_signal_handlers,
    get_default_manager,
    reset_default_manager,
)
from mysql_db_tools.models import DatabaseConfig, OperationResult

POOL_TARGET = "mysql_db_tools.database.connection.MySQLConnectionPool"


def make_config(**overrides):
    values = {"host": "localhost", "user": "u", "password": "p", "pool_size": 2}
    values.update(overrides)
    return DatabaseConfig(**values)


class ManagerTestCase(unittest.IsolatedAsyncioTestCase):
    """Base case patching the driver pool with the in-memory fake."""

    def setUp(self):
        FakePool.instances = []
        self.server = FakeServer()
        patcher = patch(POOL_TARGET, side_effect=fake_pool_factory(self.server))
        self.pool_class = patcher.start()
        self.addCleanup(patcher.stop)


class TestConfiguration(ManagerTestCase):

    async def test_missing_configuration_fails_before_any_pool(self):
        manager = ConnectionManager(env_loader=lambda: Env.from_mapping({"MYSQL_HOST": "h"}))

        with self.assertRaises(ConfigError) as cm:
            await manager.execute("SELECT 1 AS test")

        self.assertIn("MYSQL_USER", str(cm.exception))
        self.assertEqual(FakePool.instances, [])
        self.assertEqual(manager.state, ManagerState.UNCONFIGURED)

    def test_configure_reads_environment_once(self):
        loader = MagicMock(return_value=Env.from_mapping(
            {"MYSQL_HOST": "h", "MYSQL_USER": "u", "MYSQL_PASSWORD": "p"}
        ))
        manager = ConnectionManager(env_loader=loader)

        first = manager.configure()
        second = manager.configure()

        self.assertIs(first, second)
        loader.assert_called_once()
        self.assertEqual(manager.state, ManagerState.CONFIGURED)


class TestPoolLifecycle(ManagerTestCase):

    async def test_pool_is_created_lazily(self):
        manager = ConnectionManager(config=make_config())
        self.assertEqual(manager.state, ManagerState.CONFIGURED)
        self.assertIsNone(manager.pool)

        rows = await manager.execute("SELECT 1 AS test")

        self.assertEqual(rows, [{"test": 1}])
        self.assertEqual(manager.state, ManagerState.POOLED)
        self.assertEqual(len(FakePool.instances), 1)
        pool = FakePool.instances[0]
        self.assertTrue(pool.initialized)
        self.assertEqual(pool.pool_size, 2)
        self.assertEqual(pool.kwargs["host"], "localhost")
        self.assertTrue(pool.kwargs["ssl_disabled"])

    async def test_pool_is_reused(self):
        manager = ConnectionManager(config=make_config())
        await manager.execute("SELECT 1 AS test")
        await manager.execute("SELECT 1 AS test")
        self.assertEqual(len(FakePool.instances), 1)

    async def test_concurrent_first_use_creates_one_pool(self):
        manager = ConnectionManager(config=make_config(pool_size=5))

        results = await asyncio.gather(*[manager.execute("SELECT 1 AS test") for _ in range(5)])

        self.assertEqual(len(results), 5)
        self.assertEqual(len(FakePool.instances), 1)

    async def test_failed_initialization_closes_opened_connections(self):
        self.server.connect_error = InterfaceError(msg="Can't connect to MySQL server", errno=2003)
        self.server.connect_error_after = 1
        manager = ConnectionManager(config=make_config(pool_size=3))

        with self.assertRaises(InterfaceError):
            await manager.execute("SELECT 1 AS test")

        pool = FakePool.instances[0]
        self.assertTrue(pool.closed)
        self.assertEqual(pool.disconnected, 1)
        self.assertEqual(pool._idle.qsize(), 0)
        self.assertIsNone(manager.pool)
        self.assertEqual(manager.state, ManagerState.CONFIGURED)

        # Next use tries again with a fresh pool
        self.server.connect_error = None
        self.assertEqual(await manager.execute("SELECT 1 AS test"), [{"test": 1}])
        self.assertEqual(len(FakePool.instances), 2)

    async def test_non_result_statement_returns_operation_result(self):
        manager = ConnectionManager(config=make_config())
        result = await manager.execute("CREATE TABLE `t` (id INT)")
        self.assertIsInstance(result, OperationResult)
        self.assertEqual(result.affected_rows, 0)

    async def test_params_are_passed_to_driver(self):
        manager = ConnectionManager(config=make_config())
        await manager.execute("SELECT * FROM x WHERE id = %s", [7])
        self.assertEqual(self.server.statements[-1], ("SELECT * FROM x WHERE id = %s", (7,)))


class TestConnectionRelease(ManagerTestCase):

    async def test_connection_released_after_success(self):
        manager = ConnectionManager(config=make_config())
        await manager.execute("SELECT 1 AS test")

        pool = FakePool.instances[0]
        self.assertEqual(pool.checked_out, 0)

    async def test_connection_released_after_failure(self):
        manager = ConnectionManager(config=make_config(pool_size=1))

        with self.assertRaises(Exception):
            await manager.execute("SELECT * FROM `missing`")

        pool = FakePool.instances[0]
        self.assertEqual(pool.checked_out, 0)
        # The single connection is usable again
        self.assertEqual(await manager.execute("SELECT 1 AS test"), [{"test": 1}])

    async def test_cursor_closed(self):
        manager = ConnectionManager(config=make_config(pool_size=1))
        await manager.execute("SELECT 1 AS test")

        connection = FakePool.instances[0]._idle.get_nowait()
        self.assertTrue(all(cursor.closed for cursor in connection.cursors))


class TestCapacity(ManagerTestCase):

    async def test_waits_for_free_connection(self):
        manager = ConnectionManager(config=make_config(pool_size=1))
        release = asyncio.Event()
        holding = asyncio.Event()

        async def hold():
            async with manager.acquire():
                holding.set()
                await release.wait()

        holder = asyncio.create_task(hold())
        await holding.wait()

        waiter = asyncio.create_task(manager.execute("SELECT 1 AS test"))
        await asyncio.sleep(0.05)
        self.assertFalse(waiter.done())

        release.set()
        self.assertEqual(await waiter, [{"test": 1}])
        await holder

        pool = FakePool.instances[0]
        self.assertEqual(pool.max_checked_out, 1)
        self.assertEqual(pool.checked_out, 0)

    async def test_acquire_timeout(self):
        manager = ConnectionManager(config=make_config(pool_size=1, acquire_timeout=0.05))
        release = asyncio.Event()
        holding = asyncio.Event()

        async def hold():
            async with manager.acquire():
                holding.set()
                await release.wait()

        holder = asyncio.create_task(hold())
        await holding.wait()

        with self.assertRaises(asyncio.TimeoutError):
            await manager.execute("SELECT 1 AS test")

        release.set()
        await holder
        self.assertEqual(await manager.execute("SELECT 1 AS test"), [{"test": 1}])


class TestTransactions(ManagerTestCase):

    async def test_commit_on_success(self):
        manager = ConnectionManager(config=make_config(pool_size=1))
        await manager.execute("CREATE TABLE `t` (id INT)")

        async def body(txn):
            await txn.execute("INSERT INTO `t` (`id`) VALUES (%s)", [1])
            await txn.execute("INSERT INTO `t` (`id`) VALUES (%s)", [2])
            return "done"

        result = await manager.run_transaction(body)

        self.assertEqual(result, "done")
        connection = FakePool.instances[0]._idle.get_nowait()
        self.assertEqual(connection.events[-3:], ["begin", "commit", "release"])

    async def test_rollback_on_failure(self):
        manager = ConnectionManager(config=make_config(pool_size=1))

        async def body(txn):
            await txn.execute("SELECT 1 AS test")
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            await manager.run_transaction(body)

        connection = FakePool.instances[0]._idle.get_nowait()
        self.assertEqual(connection.events, ["begin", "rollback", "release"])

    async def test_transaction_unusable_after_finish(self):
        manager = ConnectionManager(config=make_config())
        captured = []

        async def body(txn):
            captured.append(txn)

        await manager.run_transaction(body)

        self.assertFalse(captured[0].active)
        with self.assertRaises(RuntimeError):
            await captured[0].execute("SELECT 1 AS test")


class TestShutdown(ManagerTestCase):

    async def test_shutdown_closes_pool(self):
        manager = ConnectionManager(config=make_config())
        await manager.execute("SELECT 1 AS test")

        await manager.shutdown()

        self.assertTrue(FakePool.instances[0].closed)
        self.assertIsNone(manager.pool)
        self.assertEqual(manager.state, ManagerState.CLOSED)

    async def test_shutdown_twice_is_noop(self):
        manager = ConnectionManager(config=make_config())
        await manager.execute("SELECT 1 AS test")

        await manager.shutdown()
        await manager.shutdown()

        self.assertEqual(manager.state, ManagerState.CLOSED)
        self.assertEqual(len(FakePool.instances), 1)

    async def test_shutdown_without_pool(self):
        manager = ConnectionManager(config=make_config())
        await manager.shutdown()
        self.assertEqual(manager.state, ManagerState.CONFIGURED)
        self.assertEqual(FakePool.instances, [])

    async def test_pool_recreated_after_shutdown(self):
        manager = ConnectionManager(config=make_config())
        await manager.execute("SELECT 1 AS test")
        await manager.shutdown()

        await manager.execute("SELECT 1 AS test")

        self.assertEqual(len(FakePool.instances), 2)
        self.assertEqual(manager.state, ManagerState.POOLED)

    async def test_connection_held_across_shutdown_is_disconnected(self):
        manager = ConnectionManager(config=make_config())

        async with manager.acquire():
            old_pool = FakePool.instances[0]
            await manager.shutdown()
            self.assertEqual(old_pool.disconnected, 1)

        # Returned to the closed pool, then disconnected with it
        self.assertEqual(old_pool._idle.qsize(), 0)
        self.assertEqual(old_pool.disconnected, 2)
        self.assertEqual(old_pool.checked_out, 0)

        await manager.execute("SELECT 1 AS test")
        self.assertEqual(len(FakePool.instances), 2)
        self.assertEqual(FakePool.instances[1].checked_out, 0)

    async def test_connection_released_normally_stays_pooled(self):
        manager = ConnectionManager(config=make_config())
        await manager.execute("SELECT 1 AS test")

        pool = FakePool.instances[0]
        self.assertEqual(pool._idle.qsize(), 2)
        self.assertEqual(pool.disconnected, 0)

    async def test_request_shutdown_schedules_close(self):
        manager = ConnectionManager(config=make_config())
        await manager.execute("SELECT 1 AS test")

        task = manager.request_shutdown("Received SIGTERM")
        await task

        self.assertEqual(manager.state, ManagerState.CLOSED)

    def test_install_signal_handlers(self):
        manager = ConnectionManager(config=make_config())
        loop = MagicMock()

        install_signal_handlers(manager, loop=loop)

        registered = [c.args[0] for c in loop.add_signal_handler.call_args_list]
        self.assertEqual(registered, [signal.SIGINT, signal.SIGTERM])
        self.assertEqual(loop.add_signal_handler.call_args_list[0].args[1], manager.request_shutdown)


class TestConnectionTest(ManagerTestCase):

    async def test_connection_ok(self):
        manager = ConnectionManager(config=make_config())
        self.assertTrue(await manager.test_connection())

    async def test_connection_failure(self):
        self.server.fail_when(lambda sql: True, InterfaceError(msg="Lost connection", errno=2013))
        manager = ConnectionManager(config=make_config())
        self.assertFalse(await manager.test_connection())


class TestDefaultManager(unittest.TestCase):

    def tearDown(self):
        reset_default_manager()

    def test_default_manager_is_shared(self):
        reset_default_manager()
        self.assertIs(get_default_manager(), get_default_manager())

    def test_reset_default_manager(self):
        first = get_default_manager()
        reset_default_manager()
        self.assertIsNot(first, get_default_manager())


if __name__ == "__main__":
    unittest.main()

#!/usr/bin/env python3
"""
Database Models

This module contains data structures related to database configuration,
statement requests and operation results.
"""

from typing import Any, NamedTuple, Sequence, Tuple


class DatabaseConfig(NamedTuple):
    """
    Database configuration settings.

    Attributes:
        host: MySQL server hostname
        user: Account used to connect
        password: Password for the account
        port: MySQL server port
        database: Default schema for new connections
        charset: Connection character set
        ssl: Whether to connect over TLS (certificates are not verified)
        pool_size: Maximum number of connections in the pool
        connect_timeout: Timeout for opening a physical connection (seconds)
        acquire_timeout: Timeout for getting a connection from the pool (seconds)
    """

    host: str
    user: str
    password: str
    port: int = 3306
    database: str = "information_schema"
    charset: str = "utf8mb4"
    ssl: bool = False
    pool_size: int = 10
    connect_timeout: int = 60  # seconds
    acquire_timeout: int = 60  # seconds


class QueryRequest(NamedTuple):
    """A parameterized statement: SQL text plus ordered bind values."""

    sql: str
    params: Tuple[Any, ...] = ()

    @classmethod
    def build(cls, sql: str, params: Sequence[Any] = ()) -> "QueryRequest":
        return cls(sql, tuple(params))


class RawSqlRequest(NamedTuple):
    """
    Caller-supplied SQL executed verbatim.

    Only the raw SQL escape hatch accepts this type. The text is trusted
    input: nothing in it is quoted or checked before it reaches the server.
    """

    sql: str
    params: Tuple[Any, ...] = ()


class OperationResult(NamedTuple):
    """
    Result of a statement that returns no rows.

    Attributes:
        affected_rows: Number of rows changed by the statement
        insert_id: Last auto-increment id generated, 0 if none
        warning_count: Number of warnings the server reported
    """

    affected_rows: int
    insert_id: int = 0
    warning_count: int = 0

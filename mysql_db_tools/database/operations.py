"""
Database operations module.

Each helper builds exactly one statement shape from its arguments and
runs it through a ConnectionManager. Identifiers are quoted into the SQL
text; values are always passed as bound parameters. Driver failures are
converted into OperationError at the helper boundary and never retried.
"""

import logging
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from pymysql.converters import escape_item

from ..constants import DEFAULT_SELECT_LIMIT, READ_ONLY_VERBS
from ..models import OperationResult, QueryRequest, RawSqlRequest
from ..utils.logging import log_statement_failure
from .connection import ConnectionManager, QueryResult, Rows, Transaction
from .errors import DRIVER_ERRORS, OperationError, PolicyViolationError
from .utils import (
    classify_database_error,
    is_read_only_query,
    qualified_name,
    quote_identifier,
    quote_identifiers,
)

logger = logging.getLogger(__name__)


def wrap_mysql_errors(operation: str):
    """
    Decorator converting driver errors raised by a helper into OperationError.

    Args:
        operation: Helper name used in the error message
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except DRIVER_ERRORS as e:
                error = OperationError.from_driver_error(operation, e)
                log_statement_failure(
                    operation,
                    error.code,
                    error.errno,
                    classify_database_error(e),
                    error.driver_message,
                    logger=logger,
                )
                raise error from e

        return wrapper
    return decorator


def _where(sql: str, where: Optional[str]) -> str:
    return f"{sql} WHERE {where}" if where else sql


def _check_limit(limit: Optional[int]) -> None:
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be zero or positive, got {limit}")


def _select_columns(columns) -> str:
    if not columns or columns == "*":
        return "*"
    if isinstance(columns, str):
        # Caller-supplied column list, used as written
        return columns
    return quote_identifiers(columns)


def build_select(
    table: str,
    database: Optional[str] = None,
    where: Optional[str] = None,
    limit: Optional[int] = None,
    columns=None,
    where_params: Sequence[Any] = (),
) -> QueryRequest:
    """Build ``SELECT <cols|*> FROM <table> [WHERE ...] [LIMIT %s]``."""
    _check_limit(limit)
    sql = _where(f"SELECT {_select_columns(columns)} FROM {qualified_name(table, database)}", where)
    params = list(where_params)
    if limit is not None:
        sql += " LIMIT %s"
        params.append(int(limit))
    return QueryRequest.build(sql, params)


def build_insert(table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> QueryRequest:
    """Build one multi-row INSERT with a placeholder per value."""
    if not columns:
        raise ValueError("insert_data requires at least one column")
    if not rows:
        raise ValueError("insert_data requires at least one row")

    width = len(columns)
    params: List[Any] = []
    for index, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(
                f"Row {index} has {len(row)} values but {width} columns were given"
            )
        params.extend(row)

    row_placeholder = "(" + ", ".join(["%s"] * width) + ")"
    values = ", ".join([row_placeholder] * len(rows))
    sql = f"INSERT INTO {quote_identifier(table)} ({quote_identifiers(columns)}) VALUES {values}"
    return QueryRequest.build(sql, params)


def build_update(
    table: str,
    updates: Mapping[str, Any],
    where: str,
    where_params: Sequence[Any] = (),
) -> QueryRequest:
    """Build ``UPDATE <table> SET <col>=%s, ... WHERE <clause>``."""
    if not updates:
        raise ValueError("update_data requires at least one column to update")
    if not where or not where.strip():
        raise ValueError("update_data requires a WHERE clause")

    assignments = ", ".join(f"{quote_identifier(column)} = %s" for column in updates)
    sql = f"UPDATE {quote_identifier(table)} SET {assignments} WHERE {where}"
    return QueryRequest.build(sql, list(updates.values()) + list(where_params))


def render_insert_statement(table: str, columns: Sequence[str], row: Mapping[str, Any], charset: str = "utf8mb4") -> str:
    """Render a single row as literal INSERT statement text."""
    values = ", ".join(escape_item(row[column], charset) for column in columns)
    return f"INSERT INTO {quote_identifier(table)} ({quote_identifiers(columns)}) VALUES ({values});"


# --- schema inspection -----------------------------------------------------


@wrap_mysql_errors("list_databases")
async def list_databases(manager: ConnectionManager) -> Rows:
    """List every database visible to the configured account."""
    return await manager.execute("SHOW DATABASES")


@wrap_mysql_errors("list_tables")
async def list_tables(manager: ConnectionManager, database: Optional[str] = None) -> Rows:
    """List the tables of ``database``, or of the connection's default schema."""
    sql = "SHOW TABLES"
    if database:
        sql += f" FROM {quote_identifier(database)}"
    return await manager.execute(sql)


@wrap_mysql_errors("describe_table")
async def describe_table(manager: ConnectionManager, table: str, database: Optional[str] = None) -> Rows:
    return await manager.execute(f"DESCRIBE {qualified_name(table, database)}")


@wrap_mysql_errors("get_table_info")
async def get_table_info(
    manager: ConnectionManager, table: str, database: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Return the information_schema.TABLES row for a table.

    Without ``database`` the connection's current schema is used.
    Returns None when the table does not exist.
    """
    schema = "%s" if database else "DATABASE()"
    sql = (
        "SELECT TABLE_NAME, ENGINE, VERSION, ROW_FORMAT, TABLE_ROWS, AVG_ROW_LENGTH, "
        "DATA_LENGTH, MAX_DATA_LENGTH, INDEX_LENGTH, DATA_FREE, AUTO_INCREMENT, "
        "CREATE_TIME, UPDATE_TIME, TABLE_COLLATION, TABLE_COMMENT "
        f"FROM information_schema.TABLES WHERE TABLE_SCHEMA = {schema} AND TABLE_NAME = %s"
    )
    params = [database, table] if database else [table]
    rows = await manager.execute(sql, params)
    return rows[0] if rows else None


@wrap_mysql_errors("get_table_indexes")
async def get_table_indexes(manager: ConnectionManager, table: str, database: Optional[str] = None) -> Rows:
    return await manager.execute(f"SHOW INDEX FROM {qualified_name(table, database)}")


@wrap_mysql_errors("get_foreign_keys")
async def get_foreign_keys(manager: ConnectionManager, table: str, database: Optional[str] = None) -> Rows:
    """Foreign key columns of a table and the columns they reference."""
    schema = "%s" if database else "DATABASE()"
    sql = (
        "SELECT CONSTRAINT_NAME, COLUMN_NAME, REFERENCED_TABLE_NAME, REFERENCED_COLUMN_NAME "
        "FROM information_schema.KEY_COLUMN_USAGE "
        f"WHERE TABLE_SCHEMA = {schema} AND TABLE_NAME = %s AND REFERENCED_TABLE_NAME IS NOT NULL "
        "ORDER BY CONSTRAINT_NAME, ORDINAL_POSITION"
    )
    params = [database, table] if database else [table]
    return await manager.execute(sql, params)


@wrap_mysql_errors("get_table_size")
async def get_table_size(manager: ConnectionManager, database: Optional[str] = None) -> Rows:
    """Per-table size in megabytes, largest first."""
    schema = "%s" if database else "DATABASE()"
    sql = (
        "SELECT TABLE_NAME AS table_name, "
        "ROUND((DATA_LENGTH + INDEX_LENGTH) / 1024 / 1024, 2) AS size_mb, "
        "TABLE_ROWS AS row_count, "
        "ROUND(DATA_LENGTH / 1024 / 1024, 2) AS data_size_mb, "
        "ROUND(INDEX_LENGTH / 1024 / 1024, 2) AS index_size_mb "
        f"FROM information_schema.TABLES WHERE TABLE_SCHEMA = {schema} "
        "ORDER BY (DATA_LENGTH + INDEX_LENGTH) DESC"
    )
    return await manager.execute(sql, [database] if database else [])


@wrap_mysql_errors("list_views")
async def list_views(manager: ConnectionManager, database: Optional[str] = None) -> Rows:
    schema = "%s" if database else "DATABASE()"
    sql = (
        "SELECT TABLE_NAME AS view_name, VIEW_DEFINITION AS definition "
        f"FROM information_schema.VIEWS WHERE TABLE_SCHEMA = {schema} ORDER BY TABLE_NAME"
    )
    return await manager.execute(sql, [database] if database else [])


@wrap_mysql_errors("get_database_info")
async def get_database_info(manager: ConnectionManager) -> Dict[str, Rows]:
    """Server version, current schema, character set, uptime and connection count."""
    return {
        "version": await manager.execute("SELECT VERSION() AS version"),
        "database": await manager.execute("SELECT DATABASE() AS current_database"),
        "charset": await manager.execute(
            "SELECT @@character_set_database AS charset, @@collation_database AS collation"
        ),
        "uptime": await manager.execute("SHOW STATUS LIKE 'Uptime'"),
        "connections": await manager.execute("SHOW STATUS LIKE 'Threads_connected'"),
    }


# --- data ------------------------------------------------------------------


@wrap_mysql_errors("create_table")
async def create_table(manager: ConnectionManager, table: str, columns_ddl: str) -> OperationResult:
    """Create a table; ``columns_ddl`` is the column definition list, used as written."""
    if not columns_ddl or not columns_ddl.strip():
        raise ValueError("create_table requires column definitions")
    return await manager.execute(f"CREATE TABLE {quote_identifier(table)} ({columns_ddl})")


@wrap_mysql_errors("insert_data")
async def insert_data(
    manager: ConnectionManager,
    table: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
) -> OperationResult:
    """Insert ``rows`` (each in ``columns`` order) with a single statement."""
    request = build_insert(table, columns, rows)
    return await manager.execute(request.sql, request.params)


@wrap_mysql_errors("query_table")
async def query_table(
    manager: ConnectionManager,
    table: str,
    where: Optional[str] = None,
    limit: Optional[int] = None,
    columns=None,
    where_params: Sequence[Any] = (),
) -> Rows:
    """
    Select rows from a table in the default schema.

    ``limit=None`` applies no LIMIT; ``limit=0`` returns no rows.
    """
    request = build_select(table, where=where, limit=limit, columns=columns, where_params=where_params)
    return await manager.execute(request.sql, request.params)


@wrap_mysql_errors("select_from_table")
async def select_from_table(
    manager: ConnectionManager,
    database: str,
    table: str,
    limit: Optional[int] = DEFAULT_SELECT_LIMIT,
    where: Optional[str] = None,
    columns=None,
    where_params: Sequence[Any] = (),
) -> Rows:
    """Select rows from ``database.table``, at most 100 unless told otherwise."""
    request = build_select(
        table, database=database, where=where, limit=limit, columns=columns, where_params=where_params
    )
    return await manager.execute(request.sql, request.params)


@wrap_mysql_errors("update_data")
async def update_data(
    manager: ConnectionManager,
    table: str,
    updates: Mapping[str, Any],
    where: str,
    where_params: Sequence[Any] = (),
) -> OperationResult:
    request = build_update(table, updates, where, where_params)
    return await manager.execute(request.sql, request.params)


@wrap_mysql_errors("delete_data")
async def delete_data(
    manager: ConnectionManager,
    table: str,
    where: str,
    where_params: Sequence[Any] = (),
) -> OperationResult:
    if not where or not where.strip():
        raise ValueError("delete_data requires a WHERE clause")
    sql = f"DELETE FROM {quote_identifier(table)} WHERE {where}"
    return await manager.execute(sql, list(where_params))


async def _count(manager, table, database, where, where_params) -> int:
    sql = _where(f"SELECT COUNT(*) AS count FROM {qualified_name(table, database)}", where)
    rows = await manager.execute(sql, list(where_params))
    if not rows:
        return 0
    return int(rows[0]["count"] or 0)


@wrap_mysql_errors("count_records")
async def count_records(
    manager: ConnectionManager,
    table: str,
    where: Optional[str] = None,
    where_params: Sequence[Any] = (),
) -> int:
    """Number of rows in ``table`` matching ``where``; 0 when nothing comes back."""
    return await _count(manager, table, None, where, where_params)


@wrap_mysql_errors("count_rows")
async def count_rows(
    manager: ConnectionManager,
    database: str,
    table: str,
    where: Optional[str] = None,
    where_params: Sequence[Any] = (),
) -> int:
    return await _count(manager, table, database, where, where_params)


# --- keys, indexes and views -----------------------------------------------


@wrap_mysql_errors("add_primary_key")
async def add_primary_key(manager: ConnectionManager, table: str, columns: Sequence[str]) -> OperationResult:
    sql = f"ALTER TABLE {quote_identifier(table)} ADD PRIMARY KEY ({quote_identifiers(columns)})"
    return await manager.execute(sql)


@wrap_mysql_errors("add_foreign_key")
async def add_foreign_key(
    manager: ConnectionManager,
    table: str,
    column: str,
    referenced_table: str,
    referenced_column: str,
    constraint_name: Optional[str] = None,
) -> OperationResult:
    constraint = f"CONSTRAINT {quote_identifier(constraint_name)} " if constraint_name else ""
    sql = (
        f"ALTER TABLE {quote_identifier(table)} ADD {constraint}"
        f"FOREIGN KEY ({quote_identifier(column)}) "
        f"REFERENCES {quote_identifier(referenced_table)} ({quote_identifier(referenced_column)})"
    )
    return await manager.execute(sql)


@wrap_mysql_errors("drop_table")
async def drop_table(manager: ConnectionManager, table: str, if_exists: bool = False) -> OperationResult:
    guard = "IF EXISTS " if if_exists else ""
    return await manager.execute(f"DROP TABLE {guard}{quote_identifier(table)}")


@wrap_mysql_errors("create_index")
async def create_index(
    manager: ConnectionManager,
    table: str,
    index_name: str,
    columns: Sequence[str],
    unique: bool = False,
) -> OperationResult:
    kind = "UNIQUE INDEX" if unique else "INDEX"
    sql = (
        f"CREATE {kind} {quote_identifier(index_name)} "
        f"ON {quote_identifier(table)} ({quote_identifiers(columns)})"
    )
    return await manager.execute(sql)


@wrap_mysql_errors("drop_index")
async def drop_index(manager: ConnectionManager, table: str, index_name: str) -> OperationResult:
    return await manager.execute(f"DROP INDEX {quote_identifier(index_name)} ON {quote_identifier(table)}")


@wrap_mysql_errors("create_view")
async def create_view(manager: ConnectionManager, view_name: str, select_sql: str) -> OperationResult:
    """Create a view; ``select_sql`` is the defining query, used as written."""
    if not select_sql or not select_sql.strip():
        raise ValueError("create_view requires a SELECT statement")
    return await manager.execute(f"CREATE VIEW {quote_identifier(view_name)} AS {select_sql}")


@wrap_mysql_errors("drop_view")
async def drop_view(manager: ConnectionManager, view_name: str) -> OperationResult:
    return await manager.execute(f"DROP VIEW {quote_identifier(view_name)}")


# --- export ----------------------------------------------------------------


@wrap_mysql_errors("backup_table")
async def backup_table(manager: ConnectionManager, table: str, include_structure: bool = True) -> str:
    """
    Export a table as SQL text.

    The result holds a comment header, optionally the CREATE TABLE
    statement, and one INSERT statement per row, joined by newlines.
    """
    name = quote_identifier(table)
    lines = [f"-- Backup of table {name}"]

    if include_structure:
        created = await manager.execute(f"SHOW CREATE TABLE {name}")
        if created:
            lines.append(f"DROP TABLE IF EXISTS {name};")
            lines.append(created[0]["Create Table"] + ";")
        lines.append("")

    rows = await manager.execute(f"SELECT * FROM {name}")
    charset = manager.config.charset if manager.config else "utf8mb4"
    for row in rows:
        lines.append(render_insert_statement(table, list(row.keys()), row, charset))

    logger.info(f"Backed up {len(rows)} rows from {name}")
    return "\n".join(lines)


@wrap_mysql_errors("run_in_transaction")
async def run_in_transaction(
    manager: ConnectionManager,
    body: Callable[[Transaction], Awaitable[Any]],
) -> Any:
    """
    Run ``body`` through ConnectionManager.run_transaction.

    Driver failures from BEGIN, COMMIT or statements inside ``body`` are
    raised as OperationError; other exceptions from ``body`` pass through.
    """
    return await manager.run_transaction(body)


# --- caller-supplied SQL ---------------------------------------------------


@wrap_mysql_errors("execute_custom_query")
async def execute_custom_query(
    manager: ConnectionManager,
    query: str,
    params: Optional[Sequence[Any]] = None,
) -> QueryResult:
    """
    Run a caller-supplied read-only statement.

    Raises:
        PolicyViolationError: If the statement is not SELECT, SHOW or DESCRIBE;
            nothing is sent to the server
    """
    if not is_read_only_query(query, READ_ONLY_VERBS):
        logger.warning("Rejected non read-only statement in execute_custom_query")
        raise PolicyViolationError("execute_custom_query", query, READ_ONLY_VERBS)
    return await manager.execute(query, params or ())


@wrap_mysql_errors("execute_sql")
async def execute_sql(manager: ConnectionManager, request: RawSqlRequest) -> QueryResult:
    """
    Run caller-supplied SQL verbatim, with no verb check.

    This is the trusted-input escape hatch; restricting what reaches it is
    the caller's job.
    """
    if not isinstance(request, RawSqlRequest):
        raise TypeError("execute_sql only accepts a RawSqlRequest")
    return await manager.execute(request.sql, request.params)

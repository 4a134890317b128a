#!/usr/bin/env python3
"""
Database package for the MySQL tools package.

This package provides connection management, configuration, the query
helpers, error types, and statement-building utilities.
"""

from .connection import (
    ConnectionManager,
    ManagerState,
    Transaction,
    create_db_connection_pool,
    close_db_connection_pool,
    install_signal_handlers,
    get_default_manager,
    reset_default_manager,
)

from .config import (
    create_database_config,
    connection_kwargs,
)

from .errors import (
    OperationError,
    PolicyViolationError,
)

from .operations import (
    wrap_mysql_errors,
    list_databases,
    list_tables,
    describe_table,
    get_table_info,
    get_table_indexes,
    get_foreign_keys,
    get_table_size,
    list_views,
    get_database_info,
    create_table,
    insert_data,
    query_table,
    select_from_table,
    update_data,
    delete_data,
    count_records,
    count_rows,
    add_primary_key,
    add_foreign_key,
    drop_table,
    create_index,
    drop_index,
    create_view,
    drop_view,
    backup_table,
    run_in_transaction,
    execute_custom_query,
    execute_sql,
)

from .utils import (
    classify_database_error,
    quote_identifier,
    quote_identifiers,
    qualified_name,
    is_read_only_query,
)

__all__ = [
    # Connection management
    "ConnectionManager",
    "ManagerState",
    "Transaction",
    "create_db_connection_pool",
    "close_db_connection_pool",
    "install_signal_handlers",
    "get_default_manager",
    "reset_default_manager",
    # Configuration
    "create_database_config",
    "connection_kwargs",
    # Errors
    "OperationError",
    "PolicyViolationError",
    # Operations
    "wrap_mysql_errors",
    "list_databases",
    "list_tables",
    "describe_table",
    "get_table_info",
    "get_table_indexes",
    "get_foreign_keys",
    "get_table_size",
    "list_views",
    "get_database_info",
    "create_table",
    "insert_data",
    "query_table",
    "select_from_table",
    "update_data",
    "delete_data",
    "count_records",
    "count_rows",
    "add_primary_key",
    "add_foreign_key",
    "drop_table",
    "create_index",
    "drop_index",
    "create_view",
    "drop_view",
    "backup_table",
    "run_in_transaction",
    "execute_custom_query",
    "execute_sql",
    # Utilities
    "classify_database_error",
    "quote_identifier",
    "quote_identifiers",
    "qualified_name",
    "is_read_only_query",
]

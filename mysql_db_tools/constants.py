#!/usr/bin/env python3
"""
Application Constants

This module contains the connection defaults and statement limits used
throughout the MySQL tools package.
"""

# Connection defaults
DEFAULT_PORT = 3306
DEFAULT_DATABASE = "information_schema"
DEFAULT_CHARSET = "utf8mb4"

# Database connection pool constants
DEFAULT_POOL_SIZE = 10
DEFAULT_CONNECT_TIMEOUT = 60  # seconds
DEFAULT_ACQUIRE_TIMEOUT = 60  # seconds

# Helper defaults
DEFAULT_SELECT_LIMIT = 100
SQL_LOG_PREVIEW_LENGTH = 100

# Statement verbs accepted by the read-only custom query helper
READ_ONLY_VERBS = ("select", "show", "describe")

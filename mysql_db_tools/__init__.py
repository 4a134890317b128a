#!/usr/bin/env python3
"""
MySQL Tools Package

Connection-managed MySQL helpers for agent tool servers: schema
inspection, parameterized reads and writes, key/index/view DDL, and
table backups, all running over a lazily-created asyncio connection pool.
"""

__version__ = "1.0.0"
__author__ = "MySQL DB Tools"
__description__ = (
    "Pooled MySQL query helpers for agent tool servers"
)
__license__ = "MIT"
__status__ = "Production"

# Import models for public API
from .models import (
    DatabaseConfig,
    OperationResult,
    QueryRequest,
    RawSqlRequest,
)

# Import constants for public API
from .constants import (
    DEFAULT_POOL_SIZE,
    DEFAULT_SELECT_LIMIT,
    READ_ONLY_VERBS,
)

# Import configuration for public API
from .config import Env, ConfigError

# Import database functions for public API
from .database import (
    ConnectionManager,
    ManagerState,
    OperationError,
    PolicyViolationError,
    get_default_manager,
    install_signal_handlers,
)

# Import utilities for public API
from .utils import (
    setup_logging,
    serialize_result,
)

# Public API exports
__all__ = [
    # Package metadata
    "__version__",
    "__author__",
    "__description__",
    # Data models
    "DatabaseConfig",
    "OperationResult",
    "QueryRequest",
    "RawSqlRequest",
    # Constants
    "DEFAULT_POOL_SIZE",
    "DEFAULT_SELECT_LIMIT",
    "READ_ONLY_VERBS",
    # Configuration
    "Env",
    "ConfigError",
    # Database
    "ConnectionManager",
    "ManagerState",
    "OperationError",
    "PolicyViolationError",
    "get_default_manager",
    "install_signal_handlers",
    # Utilities
    "setup_logging",
    "serialize_result",
]

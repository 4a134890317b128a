#!/usr/bin/env python3
"""
Data Models Module

This module contains the data structures and type definitions shared by
the connection manager and the query helpers.
"""

from .database import (
    DatabaseConfig,
    OperationResult,
    QueryRequest,
    RawSqlRequest,
)

__all__ = [
    "DatabaseConfig",
    "OperationResult",
    "QueryRequest",
    "RawSqlRequest",
]

"""
Utilities module for the MySQL tools package.

This module provides shared utility functions organized by concern:
- Logging utilities for consistent logging setup
- General helper functions for rendering results
- Text utilities for log-friendly SQL previews
"""

# Logging utilities
from .logging import setup_logging, log_statement_failure

# General helper utilities
from .helpers import serialize_result

from .text import truncate_sql

__all__ = [
    "setup_logging",
    "log_statement_failure",
    "serialize_result",
    "truncate_sql",
]

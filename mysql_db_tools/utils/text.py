"""
Text processing utilities.

Provides helpers for shortening SQL text before it is written to logs.
"""

from __future__ import annotations

import re

from ..constants import SQL_LOG_PREVIEW_LENGTH


_WHITESPACE = re.compile(r"\s+")


def truncate_sql(sql: str, limit: int = SQL_LOG_PREVIEW_LENGTH) -> str:
    """
    Collapse whitespace in a statement and cut it to ``limit`` characters.

    A trailing "..." marks statements that were cut.
    """
    if not sql:
        return sql

    s = _WHITESPACE.sub(" ", sql).strip()
    if len(s) > limit:
        return s[:limit] + "..."
    return s

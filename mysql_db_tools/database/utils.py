"""
Database utilities module.

This module provides utility functions for building statements: identifier
quoting, statement verb checks, and classification of driver errors.
"""

import re
from typing import Iterable, Optional

from ..constants import READ_ONLY_VERBS

_LEADING_VERB = re.compile(r"\s*([A-Za-z]+)\b")


def quote_identifier(name: str) -> str:
    """
    Quote a single identifier with backticks, doubling embedded backticks.

    Raises:
        ValueError: If the identifier is empty
    """
    if name is None or not str(name).strip():
        raise ValueError("Identifier must be a non-empty string")
    return "`" + str(name).replace("`", "``") + "`"


def quote_identifiers(names: Iterable[str]) -> str:
    """Quote each identifier and join them with ", "."""
    quoted = [quote_identifier(name) for name in names]
    if not quoted:
        raise ValueError("At least one identifier is required")
    return ", ".join(quoted)


def qualified_name(table: str, database: Optional[str] = None) -> str:
    """Quote ``table``, prefixed with the quoted ``database`` when given."""
    if database:
        return f"{quote_identifier(database)}.{quote_identifier(table)}"
    return quote_identifier(table)


def statement_verb(sql: str) -> str:
    """
    Return the lower-cased first keyword of a statement.

    Leading comments are not skipped: MySQL runs the body of ``/*! ... */``
    comments, so a statement that opens with a comment has no verb ("").
    """
    if not sql:
        return ""
    match = _LEADING_VERB.match(sql)
    return match.group(1).lower() if match else ""


def has_multiple_statements(sql: str) -> bool:
    """True if any text follows a ``;`` other than trailing semicolons and whitespace."""
    body = (sql or "").strip().rstrip(";").rstrip()
    return ";" in body


def is_read_only_query(sql: str, allowed: Iterable[str] = READ_ONLY_VERBS) -> bool:
    """
    True if the text is a single statement starting with one of the allowed verbs.

    A ``;`` inside a string literal also counts as a statement separator.
    """
    if has_multiple_statements(sql):
        return False
    return statement_verb(sql) in tuple(allowed)


def classify_database_error(exception: Exception) -> str:
    """
    Classify database errors into connectivity, statement, or unknown categories.

    Args:
        exception: Database exception to classify

    Returns:
        Error type: "connectivity", "statement", or "unknown"
    """
    # Socket failures and acquire timeouts never reached the server
    if isinstance(exception, OSError):
        return "connectivity"

    number = getattr(exception, "errno", None)
    if isinstance(number, int) and number > 0:
        # 2000-2999 are client-side errors (connection refused, lost, ...)
        if 2000 <= number < 3000:
            return "connectivity"
        # Access denied and unknown database are reported by the server
        if number in (1044, 1045, 1049):
            return "connectivity"
        return "statement"

    error_str = str(exception).lower()

    connectivity_indicators = [
        "can't connect",
        "connection refused",
        "lost connection",
        "access denied",
        "unknown database",
        "timed out",
        "pool exhausted",
    ]

    for indicator in connectivity_indicators:
        if indicator in error_str:
            return "connectivity"

    return "unknown"

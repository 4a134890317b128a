"""
General helper utilities for the MySQL tools package.

This module provides common utility functions that are used
by callers to turn helper results into text.
"""

import json
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if hasattr(value, "_asdict"):
        return value._asdict()
    return str(value)


def serialize_result(result: Any) -> str:
    """
    Render a helper result as indented JSON text.

    Backup exports are already text and are returned unchanged.

    Args:
        result: Rows, a count, an OperationResult, a mapping, or text

    Returns:
        Text suitable for a tool response
    """
    if isinstance(result, str):
        return result
    if hasattr(result, "_asdict"):
        result = result._asdict()
    return json.dumps(result, ensure_ascii=False, indent=2, default=_json_default)

"""
Database error types.

OperationError is the single failure shape every query helper raises for
driver-level problems. PolicyViolationError marks statements rejected
locally, before any connection is used.
"""

import asyncio
import errno as errno_codes
from typing import Optional

from mysql.connector import errorcode
from mysql.connector import Error as MySQLError

UNKNOWN_CODE = "UNKNOWN"
NO_MESSAGE = "Sin mensaje"

_CODE_NAMES = {}
for _name, _value in vars(errorcode).items():
    if _name.startswith(("ER_", "CR_")) and isinstance(_value, int):
        _CODE_NAMES.setdefault(_value, _name)


# Exceptions the helper layer converts into OperationError
DRIVER_ERRORS = (MySQLError, OSError, asyncio.TimeoutError)


def error_code_name(number: Optional[int]) -> str:
    """Map a MySQL server or client error number to its symbolic name."""
    if number is None:
        return UNKNOWN_CODE
    return _CODE_NAMES.get(number, UNKNOWN_CODE)


class OperationError(Exception):
    """
    Normalized wrapper around a driver failure.

    str(error) is always "MySQL Error en <operation>: <code> - <message>".
    """

    def __init__(
        self,
        operation: str,
        message: str,
        code: str = UNKNOWN_CODE,
        errno: Optional[int] = None,
        sql_state: Optional[str] = None,
        sql_message: Optional[str] = None,
    ):
        self.operation = operation
        self.code = code
        self.errno = errno
        self.sql_state = sql_state
        self.sql_message = sql_message
        self.driver_message = message or NO_MESSAGE
        super().__init__(f"MySQL Error en {operation}: {code} - {self.driver_message}")

    @classmethod
    def from_driver_error(cls, operation: str, error: BaseException) -> "OperationError":
        """
        Build an OperationError from a caught low-level exception.

        Handles mysql.connector errors (errno/sqlstate/msg), socket-level
        OSError, and pool acquisition timeouts.
        """
        number = getattr(error, "errno", None)
        if isinstance(number, int) and number < 0:
            number = None
        cause_number = getattr(error.__cause__, "errno", None)
        if number is None and isinstance(cause_number, int) and cause_number > 0:
            # Pool setup wraps the real connect failure
            return cls.from_driver_error(operation, error.__cause__)

        if isinstance(error, asyncio.TimeoutError):
            return cls(operation, "Timed out waiting for a pooled connection", code="ETIMEDOUT")

        if isinstance(error, OSError) and not hasattr(error, "sqlstate"):
            code = errno_codes.errorcode.get(number, UNKNOWN_CODE) if number else UNKNOWN_CODE
            return cls(operation, error.strerror or str(error), code=code, errno=number)

        message = getattr(error, "msg", None) or str(error)
        return cls(
            operation,
            message,
            code=error_code_name(number),
            errno=number,
            sql_state=getattr(error, "sqlstate", None),
            sql_message=getattr(error, "msg", None),
        )


class PolicyViolationError(Exception):
    """Raised when a statement is refused before reaching the database."""

    def __init__(self, operation: str, statement: str, allowed):
        self.operation = operation
        self.statement = statement
        self.allowed = tuple(allowed)
        verbs = ", ".join(v.upper() for v in self.allowed)
        super().__init__(f"{operation}: only {verbs} statements are allowed")

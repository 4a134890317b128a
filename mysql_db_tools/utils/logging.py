"""
Logging utilities for the MySQL tools package.

This module provides centralized logging configuration and structured
failure records so that every helper logs the same way.
"""

import json
import logging
import sys
import time
from typing import Optional


def setup_logging(verbose: bool = False):
    """
    Setup logging configuration with appropriate level and format.

    Records go to stderr because stdout carries the agent protocol.
    """
    level = logging.DEBUG if verbose else logging.INFO
    format_string = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_string,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    # Set specific logger levels
    logging.getLogger("mysql.connector").setLevel(logging.WARNING)  # Reduce driver noise
    logging.getLogger("pymysql").setLevel(logging.WARNING)


def log_statement_failure(
    operation: str,
    error_code: str,
    errno: Optional[int],
    error_class: str,
    message: str,
    timestamp: Optional[float] = None,
    logger: Optional[logging.Logger] = None
):
    """
    Log a structured, machine-readable record for a failed helper call.

    Args:
        operation: Name of the helper that failed
        error_code: Symbolic driver error code (e.g. ER_NO_SUCH_TABLE)
        errno: Numeric driver error number, if any
        error_class: Result of classify_database_error
        message: Driver error message
        timestamp: Failure timestamp (defaults to current time)
        logger: Logger instance to use (defaults to current module logger)
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if timestamp is None:
        timestamp = time.time()

    failure_record = {
        "event_type": "statement_failure",
        "timestamp": timestamp,
        "operation": operation,
        "error_code": error_code,
        "errno": errno,
        "error_class": error_class,
        "message": message,
    }

    logger.error(f"STATEMENT_FAILURE: {json.dumps(failure_record, ensure_ascii=False)}")

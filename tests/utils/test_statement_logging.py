#!/usr/bin/env python3
"""
Tests for logging setup and structured statement failure records.
"""

import json
import logging
import unittest
from unittest.mock import MagicMock, patch

from mysql_db_tools.utils.logging import log_statement_failure, setup_logging


class TestLogStatementFailure(unittest.TestCase):

    def test_record_is_json_with_fixed_keys(self):
        logger = MagicMock()

        log_statement_failure(
            "query_table",
            "ER_NO_SUCH_TABLE",
            1146,
            "statement",
            "Table 'test.missing' doesn't exist",
            timestamp=1700000000.0,
            logger=logger,
        )

        logger.error.assert_called_once()
        line = logger.error.call_args.args[0]
        self.assertTrue(line.startswith("STATEMENT_FAILURE: "))
        record = json.loads(line[len("STATEMENT_FAILURE: "):])
        self.assertEqual(record, {
            "event_type": "statement_failure",
            "timestamp": 1700000000.0,
            "operation": "query_table",
            "error_code": "ER_NO_SUCH_TABLE",
            "errno": 1146,
            "error_class": "statement",
            "message": "Table 'test.missing' doesn't exist",
        })

    def test_default_timestamp(self):
        logger = MagicMock()
        with patch("mysql_db_tools.utils.logging.time.time", return_value=42.0):
            log_statement_failure("list_databases", "UNKNOWN", None, "unknown", "boom", logger=logger)

        record = json.loads(logger.error.call_args.args[0].split(": ", 1)[1])
        self.assertEqual(record["timestamp"], 42.0)
        self.assertIsNone(record["errno"])

    def test_default_logger(self):
        with self.assertLogs("mysql_db_tools.utils.logging", level="ERROR") as logs:
            log_statement_failure("drop_table", "ER_BAD_TABLE_ERROR", 1051, "statement", "Unknown table")
        self.assertIn('"operation": "drop_table"', logs.output[0])


class TestSetupLogging(unittest.TestCase):

    @patch("mysql_db_tools.utils.logging.logging.basicConfig")
    def test_info_level_by_default(self, mock_basic):
        setup_logging()
        self.assertEqual(mock_basic.call_args.kwargs["level"], logging.INFO)

    @patch("mysql_db_tools.utils.logging.logging.basicConfig")
    def test_verbose_enables_debug(self, mock_basic):
        setup_logging(verbose=True)
        self.assertEqual(mock_basic.call_args.kwargs["level"], logging.DEBUG)

    @patch("mysql_db_tools.utils.logging.logging.basicConfig")
    def test_logs_go_to_stderr(self, mock_basic):
        import sys
        setup_logging()
        self.assertIs(mock_basic.call_args.kwargs["stream"], sys.stderr)
        self.assertEqual(logging.getLogger("mysql.connector").level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()

#!/usr/bin/env python3
"""
Unit tests for init_db retry behaviour.
"""

import unittest
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from core.exceptions import SchemaMismatchError
from database.init_db import init_db


class TestInitDb(unittest.TestCase):

    def setUp(self):
        patcher = patch.object(init_db.retry, 'sleep', MagicMock())
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_01_creates_tables_then_verifies(self):
        with patch('database.init_db.Base') as base, patch('database.init_db.verify_schema') as verify:
            init_db()
        base.metadata.create_all.assert_called_once()
        verify.assert_called_once()

    def test_02_retries_connection_errors(self):
        print("\n📊 UNIT Test 2: Retry Until Database Is Up")
        error = OperationalError("SELECT 1", {}, Exception("connection refused"))
        with patch('database.init_db.Base') as base, patch('database.init_db.verify_schema'):
            base.metadata.create_all.side_effect = [error, error, None]
            init_db()
        self.assertEqual(base.metadata.create_all.call_count, 3)
        print("  ✓ succeeded on third attempt")

    def test_03_schema_mismatch_is_not_retried(self):
        with patch('database.init_db.Base'), patch('database.init_db.verify_schema') as verify:
            verify.side_effect = SchemaMismatchError("missing tutor_status_types")
            with self.assertRaises(SchemaMismatchError):
                init_db()
        verify.assert_called_once()


if __name__ == "__main__":
    unittest.main()

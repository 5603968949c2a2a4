#!/usr/bin/env python3
"""
Unit tests for DeletionOrchestrator against the in-memory RecordStore.
"""

import unittest
from unittest.mock import MagicMock

from core.config_loader import DeletionConfig
from core.deletion import (
    AuthoritativePreview,
    DeletionOrchestrator,
    DeletionState,
    LoggingAuditSink,
    ManualPreview,
    constraint_guidance,
)
from core.deletion.dependents import DEPENDENT_TABLES
from core.exceptions import (
    ConstraintError,
    DeletionFailedError,
    NotFoundError,
    PreviewDegradedWarning,
    SchemaMismatchError,
    VerificationFailedError,
)
from database.store import RecordStoreError
from tests.mocks.store_mocks import EDUPRIMA_FOREIGN_KEYS, InMemoryRecordStore, tutor_account_rows

USER_ID = "11111111-1111-1111-1111-111111111111"
EDUCATOR_ID = "22222222-2222-2222-2222-222222222222"
MISSING_ID = "99999999-9999-9999-9999-999999999999"

EXPECTED_MANUAL_PREVIEW = [
    ("users_universal", 1, "User Account"),
    ("user_profiles", 1, "Personal Profile"),
    ("user_addresses", 2, "Addresses"),
    ("user_demographics", 1, "Demographics"),
    ("educator_details", 1, "Educator Profile"),
    ("tutor_availability_config", 1, "Schedule Config"),
    ("tutor_teaching_preferences", 1, "Teaching Preferences"),
    ("tutor_personality_traits", 1, "Personality Profile"),
    ("tutor_program_mappings", 3, "Subject Mappings"),
    ("tutor_banking_info", 1, "Banking Information"),
    ("tutor_management", 1, "Management Data"),
    ("document_storage", 2, "Documents"),
]


def as_tuples(preview):
    return [(e.table_name, e.records_affected, e.data_type) for e in preview.entries]


class TestDeletionPreview(unittest.TestCase):

    def test_01_manual_preview_in_fixed_order(self):
        print("\n📊 UNIT Test 1: Manual Preview Order")
        store = InMemoryRecordStore(tutor_account_rows())
        preview = DeletionOrchestrator(store, DeletionConfig()).preview_deletion(USER_ID)

        self.assertIsInstance(preview, ManualPreview)
        self.assertIsInstance(preview.warning, PreviewDegradedWarning)
        self.assertEqual(as_tuples(preview), EXPECTED_MANUAL_PREVIEW)
        self.assertEqual(preview.total_records, 16)
        print(f"  ✓ {len(preview.entries)} tables, {preview.total_records} records")

    def test_02_only_nonzero_tables(self):
        rows = tutor_account_rows()
        rows['document_storage'] = []
        rows['tutor_banking_info'] = []
        store = InMemoryRecordStore(rows)
        preview = DeletionOrchestrator(store).preview_deletion(USER_ID)
        tables = [e.table_name for e in preview.entries]
        self.assertNotIn('document_storage', tables)
        self.assertNotIn('tutor_banking_info', tables)
        self.assertEqual(len(tables), 10)

    def test_03_account_without_educator_profile(self):
        rows = {
            'users_universal': [{'id': USER_ID, 'email': 'x@example.com', 'user_code': 'STU-1'}],
            'user_profiles': [{'id': 'p1', 'user_id': USER_ID, 'full_name': 'X'}],
        }
        store = InMemoryRecordStore(rows)
        preview = DeletionOrchestrator(store).preview_deletion(USER_ID)
        self.assertEqual([e.table_name for e in preview.entries], ['users_universal', 'user_profiles'])
        counted = [table for op, table in store.calls if op == 'count']
        self.assertNotIn('tutor_banking_info', counted)

    def test_04_authoritative_preview_preferred(self):
        print("\n📊 UNIT Test 4: Authoritative Preview")
        store = InMemoryRecordStore(tutor_account_rows(), preview_rows=[
            {'table_name': 'users_universal', 'records_affected': 1, 'data_type': 'User Account'},
            {'table_name': 'document_storage', 'records_affected': 2, 'data_type': 'Documents'},
            {'table_name': 'user_addresses', 'records_affected': 0, 'data_type': 'Addresses'},
        ])
        preview = DeletionOrchestrator(store).preview_deletion(USER_ID)

        self.assertIsInstance(preview, AuthoritativePreview)
        self.assertEqual(preview.source.value, "authoritative")
        self.assertEqual(as_tuples(preview), [
            ('users_universal', 1, 'User Account'),
            ('document_storage', 2, 'Documents'),
        ])
        self.assertFalse(any(op == 'count' for op, _ in store.calls))
        print("  ✓ Aggregate rows used as-is, zero counts dropped")

    def test_05_fallback_when_aggregate_errors(self):
        print("\n📊 UNIT Test 5: Fallback on Aggregate Error")
        store = InMemoryRecordStore(
            tutor_account_rows(),
            preview_rows=[],
            preview_error=RecordStoreError("function preview_user_deletion(uuid) does not exist")
        )
        preview = DeletionOrchestrator(store).preview_deletion(USER_ID)
        self.assertIsInstance(preview, ManualPreview)
        self.assertEqual(as_tuples(preview), EXPECTED_MANUAL_PREVIEW)
        print("  ✓ Manual preview, marked degraded")

    def test_06_fallback_on_malformed_aggregate_rows(self):
        store = InMemoryRecordStore(tutor_account_rows(), preview_rows=[{'table': 'users_universal'}])
        preview = DeletionOrchestrator(store).preview_deletion(USER_ID)
        self.assertIsInstance(preview, ManualPreview)

    def test_07_aggregate_disabled_by_config(self):
        store = InMemoryRecordStore(tutor_account_rows(), preview_rows=[
            {'table_name': 'users_universal', 'records_affected': 1, 'data_type': 'User Account'},
        ])
        preview = DeletionOrchestrator(store, DeletionConfig(use_aggregate_preview=False)).preview_deletion(USER_ID)
        self.assertIsInstance(preview, ManualPreview)
        self.assertNotIn(('preview_cascade', 'users_universal'), store.calls)

    def test_08_preview_missing_record(self):
        store = InMemoryRecordStore(tutor_account_rows())
        orchestrator = DeletionOrchestrator(store)
        with self.assertRaises(NotFoundError):
            orchestrator.preview_deletion(MISSING_ID)
        self.assertEqual(orchestrator.state, DeletionState.PREVIEW_FAILED)

    def test_09_preview_is_stable_and_read_only(self):
        store = InMemoryRecordStore(tutor_account_rows())
        orchestrator = DeletionOrchestrator(store)
        first = orchestrator.preview_deletion(USER_ID)
        second = orchestrator.preview_deletion(USER_ID)
        self.assertEqual(as_tuples(first), as_tuples(second))
        self.assertEqual(orchestrator.state, DeletionState.PREVIEW_READY)
        self.assertEqual(store.tables, tutor_account_rows())
        self.assertEqual(store.commits, 0)


class TestConfirmDeletion(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryRecordStore(tutor_account_rows())
        self.orchestrator = DeletionOrchestrator(self.store, DeletionConfig())

    def test_01_cascade_delete_and_audit(self):
        print("\n📊 UNIT Test 1: Cascade Delete")
        record = self.orchestrator.confirm_deletion(USER_ID, "admin-7")

        self.assertEqual(record.record_id, USER_ID)
        self.assertEqual(record.email, "budi@example.com")
        self.assertEqual(record.user_code, "TUT-0001")
        self.assertEqual(record.actor_id, "admin-7")
        self.assertIsNotNone(record.deleted_at.tzinfo)
        self.assertIsInstance(record.preview, ManualPreview)
        self.assertIsNone(record.snapshot)
        self.assertEqual(self.orchestrator.state, DeletionState.VERIFIED)

        audit_rows = self.store.tables['user_deletion_audit']
        self.assertEqual(len(audit_rows), 1)
        self.assertEqual(audit_rows[0]['deleted_user_id'], USER_ID)
        self.assertEqual(audit_rows[0]['deleted_by'], "admin-7")
        self.assertEqual(audit_rows[0]['preview_source'], "manual")
        self.assertEqual(len(audit_rows[0]['affected_tables']), 12)
        print(f"  ✓ Deleted {record.email}, audit written")

    def test_02_cascade_completeness(self):
        print("\n📊 UNIT Test 2: Cascade Completeness")
        preview = self.orchestrator.preview_deletion(USER_ID)
        self.assertTrue(preview.entries)

        self.orchestrator.confirm_deletion(USER_ID, "admin-7", preview=preview)

        for dependent in DEPENDENT_TABLES:
            remaining = [
                row for row in self.store.tables.get(dependent.table, [])
                if row.get(dependent.column) in (USER_ID, EDUCATOR_ID)
            ]
            self.assertEqual(remaining, [], dependent.table)
        # Only one delete was issued; the rest cascaded
        self.assertEqual([t for op, t in self.store.calls if op == 'delete'], ['users_universal'])
        print("  ✓ Every dependent table is empty for the deleted user")

    def test_03_idempotence(self):
        print("\n📊 UNIT Test 3: Deleting Twice")
        self.orchestrator.confirm_deletion(USER_ID, "admin-7")
        with self.assertRaises(NotFoundError):
            DeletionOrchestrator(self.store).confirm_deletion(USER_ID, "admin-7")
        self.assertEqual(len(self.store.tables['user_deletion_audit']), 1)
        print("  ✓ Second call -> NotFoundError, one audit record")

    def test_04_blocking_constraint(self):
        print("\n📊 UNIT Test 4: Foreign Key Without Cascade")
        keys = [fk for fk in EDUPRIMA_FOREIGN_KEYS if fk[0] != 'document_storage']
        keys.append(('document_storage', 'user_id', 'users_universal', 'RESTRICT'))
        store = InMemoryRecordStore(tutor_account_rows(), foreign_keys=keys)

        with self.assertRaises(ConstraintError) as ctx:
            DeletionOrchestrator(store).confirm_deletion(USER_ID, "admin-7")

        error = ctx.exception
        self.assertEqual(error.constraint, "document_storage_user_id_fkey")
        self.assertEqual(error.table, "document_storage")
        self.assertTrue(str(error).startswith('CASCADE DELETE not configured! Foreign key constraint '
                                              '"document_storage_user_id_fkey" on table "document_storage"'))
        self.assertIn("cleanup-duplicate-constraints.sql", str(error))
        # Nothing deleted, nothing audited, no manual per-table deletes
        self.assertEqual(store.tables['users_universal'][0]['id'], USER_ID)
        self.assertEqual(len(store.tables['user_profiles']), 1)
        self.assertNotIn('user_deletion_audit', store.tables)
        self.assertEqual([t for op, t in store.calls if op == 'delete'], ['users_universal'])
        print(f"  ✓ {error}")

    def test_05_constraint_guidance(self):
        self.assertIn("should CASCADE", constraint_guidance("educator_details_user_id_fkey"))
        self.assertIn("SET NULL", constraint_guidance("tutor_management_created_by_fkey"))
        self.assertEqual(
            constraint_guidance("tutor_banking_info_tutor_id_fkey"),
            "Please run the CASCADE cleanup script first."
        )

    def test_06_set_null_audit_columns_survive(self):
        admin_id = "33333333-3333-3333-3333-333333333333"
        rows = tutor_account_rows()
        rows['users_universal'].append({'id': admin_id, 'email': 'admin@example.com', 'user_code': 'ADM-1'})
        rows['tutor_management'].append(
            {'id': 'm2', 'user_id': 'someone-else', 'status_tutor': 'active', 'created_by': admin_id}
        )
        store = InMemoryRecordStore(rows)

        DeletionOrchestrator(store).confirm_deletion(admin_id, "root")

        other = next(r for r in store.tables['tutor_management'] if r['id'] == 'm2')
        self.assertIsNone(other['created_by'])

    def test_07_verification_failure(self):
        print("\n📊 UNIT Test 7: Record Still Present After Delete")
        store = InMemoryRecordStore(tutor_account_rows(), ignore_deletes=True)
        orchestrator = DeletionOrchestrator(store)

        with self.assertRaises(VerificationFailedError):
            orchestrator.confirm_deletion(USER_ID, "admin-7")
        self.assertEqual(orchestrator.state, DeletionState.DELETED)
        self.assertNotIn('user_deletion_audit', store.tables)
        print("  ✓ VerificationFailedError, no audit record")

    def test_08_concurrent_delete_reports_not_found(self):
        def someone_else_deletes(store):
            store.tables['users_universal'] = []

        store = InMemoryRecordStore(tutor_account_rows(), before_delete=someone_else_deletes)
        orchestrator = DeletionOrchestrator(store)

        with self.assertRaises(NotFoundError):
            orchestrator.confirm_deletion(USER_ID, "admin-7")
        self.assertEqual(orchestrator.state, DeletionState.DELETE_FAILED)

    def test_09_generic_store_failure(self):
        store = MagicMock()
        store.select.return_value = [{'id': USER_ID, 'email': 'budi@example.com', 'user_code': 'TUT-0001'}]
        store.preview_cascade.return_value = []
        store.delete.side_effect = RecordStoreError("connection reset")

        with self.assertRaises(DeletionFailedError):
            DeletionOrchestrator(store).confirm_deletion(USER_ID, "admin-7")
        store.rollback.assert_called_once()

    def test_10_audit_failure_does_not_fail_deletion(self):
        print("\n📊 UNIT Test 10: Audit Write Failure")
        store = InMemoryRecordStore(tutor_account_rows(), fail_inserts_into=['user_deletion_audit'])

        with self.assertLogs('core.deletion.orchestrator', level='WARNING') as logs:
            record = DeletionOrchestrator(store).confirm_deletion(USER_ID, "admin-7")

        self.assertEqual(record.record_id, USER_ID)
        self.assertEqual(store.tables['users_universal'], [])
        self.assertEqual(store.rollbacks, 1)
        self.assertTrue(any("Audit logging failed" in line for line in logs.output))
        print("  ✓ Deletion kept, warning logged")

    def test_11_logging_audit_sink(self):
        store = InMemoryRecordStore(tutor_account_rows())
        orchestrator = DeletionOrchestrator(store, DeletionConfig(audit_sink="log"))
        self.assertIsInstance(orchestrator.audit_sink, LoggingAuditSink)

        with self.assertLogs('core.deletion.audit', level='INFO') as logs:
            orchestrator.confirm_deletion(USER_ID, "admin-7")
        self.assertNotIn('user_deletion_audit', store.tables)
        self.assertTrue(any(USER_ID in line for line in logs.output))

    def test_12_snapshot_captured_before_delete(self):
        print("\n📊 UNIT Test 12: Snapshot")
        store = InMemoryRecordStore(tutor_account_rows())
        record = DeletionOrchestrator(store, DeletionConfig(capture_snapshot=True)).confirm_deletion(USER_ID, "admin-7")

        self.assertEqual(record.snapshot['users_universal'][0]['email'], "budi@example.com")
        self.assertEqual(len(record.snapshot['user_addresses']), 2)
        self.assertEqual(len(record.snapshot['document_storage']), 2)
        self.assertEqual(store.tables['user_deletion_audit'][0]['snapshot'], record.snapshot)
        print(f"  ✓ {sum(len(v) for v in record.snapshot.values())} rows captured")

    def test_13_shown_preview_is_recorded(self):
        preview = AuthoritativePreview(record_id=USER_ID)
        record = self.orchestrator.confirm_deletion(USER_ID, "admin-7", preview=preview)
        self.assertIs(record.preview, preview)
        self.assertEqual(self.store.tables['user_deletion_audit'][0]['preview_source'], "authoritative")

    def test_14_failed_audit_preview_does_not_block_delete(self):
        print("\n📊 UNIT Test 14: Preview Count Failure During Confirm")
        store = InMemoryRecordStore(
            tutor_account_rows(),
            read_errors={'tutor_banking_info': RecordStoreError("permission denied for table tutor_banking_info")}
        )

        with self.assertLogs('core.deletion.orchestrator', level='WARNING') as logs:
            record = DeletionOrchestrator(store).confirm_deletion(USER_ID, "admin-7")

        self.assertIsNone(record.preview)
        self.assertEqual(store.tables['users_universal'], [])
        self.assertEqual(store.tables['user_profiles'], [])
        self.assertFalse(store.aborted)
        self.assertEqual(store.commits, 2)
        self.assertIn(('savepoint', ''), store.calls)
        self.assertTrue(any("Could not build preview" in line for line in logs.output))
        print("  ✓ Deleted without preview, warning logged")

    def test_15_snapshot_schema_mismatch_does_not_block_delete(self):
        print("\n📊 UNIT Test 15: Snapshot Schema Mismatch")
        store = InMemoryRecordStore(
            tutor_account_rows(),
            read_errors={'user_demographics': SchemaMismatchError("Column 'user_id' is not declared")}
        )
        orchestrator = DeletionOrchestrator(store, DeletionConfig(capture_snapshot=True))

        with self.assertLogs('core.deletion.orchestrator', level='WARNING') as logs:
            record = orchestrator.confirm_deletion(USER_ID, "admin-7", preview=ManualPreview(record_id=USER_ID))

        self.assertIsNone(record.snapshot)
        self.assertEqual(store.tables['users_universal'], [])
        self.assertEqual(orchestrator.state, DeletionState.VERIFIED)
        self.assertIsNone(store.tables['user_deletion_audit'][0]['snapshot'])
        self.assertTrue(any("Snapshot of" in line for line in logs.output))
        print("  ✓ Deleted without snapshot")


if __name__ == "__main__":
    unittest.main()

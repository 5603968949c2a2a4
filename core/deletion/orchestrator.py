#!/usr/bin/env python3
"""
Deletion Orchestrator - preview and execute a cascading account delete.

    Idle -> PreviewRequested -> PreviewReady | PreviewFailed
         -> DeleteConfirmed -> Deleted | DeleteFailed -> Verified

The delete itself is a single statement on users_universal; the database
cascades it to every dependent table. If a dependent foreign key is not
configured for cascade, the delete fails with a ConstraintError naming the
constraint. There is no per-table manual delete fallback: a partial delete
is worse than a loud failure.

No state is held between preview and confirm. The preview shown to the
operator may be stale by the time they confirm; the post-delete
verification is the final check.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic_core import to_jsonable_python

from core.config_loader import DeletionConfig
from core.deletion.audit import AuditSink, build_audit_sink
from core.deletion.dependents import (
    CORE_TABLE,
    DEPENDENT_TABLES,
    EDUCATOR_TABLE,
    KEY_EDUCATOR,
    SNAPSHOT_TABLES,
)
from core.deletion.models import (
    AuthoritativePreview,
    DeletionAuditRecord,
    DeletionPreview,
    DeletionPreviewEntry,
    DeletionState,
    ManualPreview,
)
from core.exceptions import (
    ConstraintError,
    DeletionFailedError,
    NotFoundError,
    SchemaMismatchError,
    VerificationFailedError,
)
from database.predicates import eq, in_
from database.store import (
    AggregatePreviewUnavailable,
    RecordStoreError,
    ReferentialIntegrityViolation,
)

logger = logging.getLogger(__name__)


def constraint_guidance(constraint: str) -> str:
    """Name the fix for a foreign key that is blocking an account delete."""
    if 'user_id' in constraint:
        return (
            "This is a primary user_id constraint that should CASCADE. "
            "Run cleanup-duplicate-constraints.sql to fix duplicate constraints."
        )
    if '_by' in constraint:
        return (
            "This is an audit column that should be SET NULL. "
            "Run fix-remaining-cascade-constraints.sql to fix admin columns."
        )
    return "Please run the CASCADE cleanup script first."


class DeletionOrchestrator:
    """
    Runs preview_deletion / confirm_deletion against a RecordStore.

    One orchestrator per request; the store's session is not shared
    between requests.
    """

    def __init__(self, store, config: Optional[DeletionConfig] = None, audit_sink: Optional[AuditSink] = None):
        self.store = store
        self.config = config or DeletionConfig()
        self.audit_sink = audit_sink or build_audit_sink(self.config, store)
        self.state = DeletionState.IDLE

    def _transition(self, state: DeletionState, record_id: str) -> None:
        logger.debug(f"Deletion {record_id}: {self.state.value} -> {state.value}")
        self.state = state

    def _load_core_record(self, record_id: str) -> Dict[str, Any]:
        rows = self.store.select(
            CORE_TABLE, [eq('id', record_id)], columns=['id', 'email', 'user_code'], limit=1
        )
        if not rows:
            raise NotFoundError(record_id, CORE_TABLE)
        return rows[0]

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def preview_deletion(self, record_id: str) -> DeletionPreview:
        """
        Count the rows a delete of record_id would remove.

        Returns an AuthoritativePreview when the store's aggregate preview
        works, otherwise a ManualPreview built from DEPENDENT_TABLES.

        Raises:
            NotFoundError: record_id is not in users_universal
        """
        self._transition(DeletionState.PREVIEW_REQUESTED, record_id)
        try:
            self._load_core_record(record_id)
            preview = self._build_preview(record_id)
        except Exception:
            self._transition(DeletionState.PREVIEW_FAILED, record_id)
            raise

        self._transition(DeletionState.PREVIEW_READY, record_id)
        logger.info(
            f"Deletion preview for {record_id}: {preview.total_records} records "
            f"in {len(preview.entries)} tables ({preview.source.value})"
        )
        return preview

    def _build_preview(self, record_id: str) -> DeletionPreview:
        if self.config.use_aggregate_preview:
            try:
                return self._aggregate_preview(record_id)
            except RecordStoreError as e:
                logger.warning(f"Aggregate preview unavailable for {record_id}, enumerating tables: {e}")
        return self._manual_preview(record_id)

    def _aggregate_preview(self, record_id: str) -> AuthoritativePreview:
        rows = self.store.preview_cascade(CORE_TABLE, record_id)
        entries = []
        for row in rows:
            try:
                entry = DeletionPreviewEntry(
                    table_name=str(row['table_name']),
                    records_affected=int(row['records_affected']),
                    data_type=str(row['data_type']),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise AggregatePreviewUnavailable(f"Malformed aggregate preview row {row!r}") from e
            if entry.records_affected > 0:
                entries.append(entry)
        return AuthoritativePreview(record_id=record_id, entries=tuple(entries))

    def _educator_ids(self, record_id: str) -> List[Any]:
        rows = self.store.select(EDUCATOR_TABLE, [eq('user_id', record_id)], columns=['id'])
        return [row['id'] for row in rows]

    def _manual_preview(self, record_id: str) -> ManualPreview:
        educator_ids = self._educator_ids(record_id)

        entries = []
        for dependent in DEPENDENT_TABLES:
            if dependent.key == KEY_EDUCATOR:
                if not educator_ids:
                    continue
                count = self.store.count(dependent.table, [in_(dependent.column, educator_ids)])
            else:
                count = self.store.count(dependent.table, [eq(dependent.column, record_id)])
            if count > 0:
                entries.append(DeletionPreviewEntry(dependent.table, count, dependent.label))

        return ManualPreview(record_id=record_id, entries=tuple(entries))

    # ------------------------------------------------------------------
    # Confirm
    # ------------------------------------------------------------------

    def confirm_deletion(
        self,
        record_id: str,
        actor_id: str,
        preview: Optional[DeletionPreview] = None
    ) -> DeletionAuditRecord:
        """
        Delete the account and everything that cascades from it.

        Args:
            record_id: users_universal.id
            actor_id: Who confirmed the delete, stamped on the audit record
            preview: The preview the operator was shown; recomputed when omitted

        Raises:
            NotFoundError: Record absent before the delete, or removed concurrently
            ConstraintError: A dependent foreign key is not configured for cascade
            DeletionFailedError: The store failed the delete for another reason
            VerificationFailedError: The record is still readable after the delete
        """
        self._transition(DeletionState.DELETE_CONFIRMED, record_id)
        core = self._load_core_record(record_id)
        logger.info(f"Deleting user {record_id} ({core.get('email')}, {core.get('user_code')}) for {actor_id}")

        if preview is None:
            preview = self._audit_preview(record_id)

        snapshot = self._capture_snapshot(record_id) if self.config.capture_snapshot else None

        self._delete_core_record(record_id)
        self._transition(DeletionState.DELETED, record_id)

        self._verify_deleted(record_id)
        self._transition(DeletionState.VERIFIED, record_id)
        logger.info(f"CASCADE delete of {record_id} completed")

        record = DeletionAuditRecord(
            record_id=str(record_id),
            email=core.get('email'),
            user_code=core.get('user_code'),
            deleted_at=datetime.now(timezone.utc),
            preview=preview,
            actor_id=actor_id,
            snapshot=snapshot,
        )
        self._write_audit(record)
        return record

    def _audit_preview(self, record_id: str) -> Optional[DeletionPreview]:
        try:
            with self.store.savepoint():
                return self._build_preview(record_id)
        except (RecordStoreError, SchemaMismatchError) as e:
            logger.warning(f"Could not build preview for audit of {record_id}: {e}")
            return None

    def _delete_core_record(self, record_id: str) -> None:
        try:
            deleted = self.store.delete(CORE_TABLE, [eq('id', record_id)])
            self.store.commit()
        except ReferentialIntegrityViolation as e:
            self._rollback_quietly()
            self._transition(DeletionState.DELETE_FAILED, record_id)
            error = ConstraintError(e.constraint, e.table, constraint_guidance(e.constraint))
            logger.error(f"Delete of {record_id} blocked: {error}")
            raise error from e
        except RecordStoreError as e:
            self._rollback_quietly()
            self._transition(DeletionState.DELETE_FAILED, record_id)
            logger.error(f"Delete of {record_id} failed: {e}")
            raise DeletionFailedError(f"Delete failed: {e}") from e

        if deleted == 0:
            # Someone else removed it between load and delete
            self._transition(DeletionState.DELETE_FAILED, record_id)
            raise NotFoundError(record_id, CORE_TABLE)

    def _verify_deleted(self, record_id: str) -> None:
        remaining = self.store.select(CORE_TABLE, [eq('id', record_id)], columns=['id'], limit=1)
        if remaining:
            error = VerificationFailedError(record_id)
            logger.error(str(error))
            raise error

    def _capture_snapshot(self, record_id: str) -> Optional[Dict[str, List[Dict[str, Any]]]]:
        columns = {d.table: d.column for d in DEPENDENT_TABLES}
        try:
            with self.store.savepoint():
                snapshot = {
                    table: self.store.select(table, [eq(columns[table], record_id)])
                    for table in SNAPSHOT_TABLES
                }
        except (RecordStoreError, SchemaMismatchError) as e:
            logger.warning(f"Snapshot of {record_id} failed (continuing with delete): {e}")
            return None

        snapshot = to_jsonable_python(snapshot)
        logger.info(f"Snapshot of {record_id}: {sum(len(rows) for rows in snapshot.values())} rows")
        return snapshot

    def _write_audit(self, record: DeletionAuditRecord) -> None:
        try:
            self.audit_sink.write(record)
        except Exception as e:
            logger.warning(f"Audit logging failed for {record.record_id}: {e}")
            self._rollback_quietly()

    def _rollback_quietly(self) -> None:
        try:
            self.store.rollback()
        except RecordStoreError as e:
            logger.warning(f"Rollback failed: {e}")

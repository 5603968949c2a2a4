"""
Audit sinks for completed deletions.

Sinks may raise; the orchestrator logs the failure and keeps the deletion.
"""

import logging
from typing import Protocol

from core.config_loader import DeletionConfig
from core.deletion.models import DeletionAuditRecord

logger = logging.getLogger(__name__)

AUDIT_TABLE = "user_deletion_audit"


class AuditSink(Protocol):
    def write(self, record: DeletionAuditRecord) -> None: ...


class DatabaseAuditSink:
    """Appends one row to user_deletion_audit per deletion."""

    def __init__(self, store):
        self.store = store

    def write(self, record: DeletionAuditRecord) -> None:
        self.store.insert(AUDIT_TABLE, {
            "deleted_user_id": record.record_id,
            "deleted_email": record.email,
            "deleted_user_code": record.user_code,
            "deleted_by": record.actor_id,
            "deleted_at": record.deleted_at,
            "deletion_method": "cascade_api",
            "preview_source": record.preview_source,
            "affected_tables": record.affected_tables(),
            "snapshot": record.snapshot,
        })
        self.store.commit()


class LoggingAuditSink:
    def write(self, record: DeletionAuditRecord) -> None:
        logger.info(
            f"AUDIT user deleted: id={record.record_id} email={record.email} "
            f"code={record.user_code} by={record.actor_id} at={record.deleted_at.isoformat()} "
            f"preview={record.preview_source} tables={record.affected_tables()}"
        )


def build_audit_sink(config: DeletionConfig, store) -> AuditSink:
    if config.audit_sink == "log":
        return LoggingAuditSink()
    return DatabaseAuditSink(store)

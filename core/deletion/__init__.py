"""
Deletion Module - cascading account delete with preview, verification and audit.

Public API:
- DeletionOrchestrator: preview_deletion() and confirm_deletion()
- AuthoritativePreview / ManualPreview: the two preview variants
- DeletionAuditRecord: returned by a successful confirm_deletion()

Modules:
- models.py: Preview entries, preview variants, audit record, states
- dependents.py: Dependent tables in preview order
- audit.py: Database and logging audit sinks
- orchestrator.py: DeletionOrchestrator
"""

from core.deletion.audit import DatabaseAuditSink, LoggingAuditSink, build_audit_sink
from core.deletion.models import (
    AuthoritativePreview,
    DeletionAuditRecord,
    DeletionPreview,
    DeletionPreviewEntry,
    DeletionState,
    ManualPreview,
    PreviewSource,
)
from core.deletion.orchestrator import DeletionOrchestrator, constraint_guidance

__all__ = [
    'AuthoritativePreview',
    'DatabaseAuditSink',
    'DeletionAuditRecord',
    'DeletionOrchestrator',
    'DeletionPreview',
    'DeletionPreviewEntry',
    'DeletionState',
    'LoggingAuditSink',
    'ManualPreview',
    'PreviewSource',
    'build_audit_sink',
    'constraint_guidance',
]

#!/usr/bin/env python3
"""
Deletion Models - preview entries, the tagged preview variant and the audit record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from core.exceptions import PreviewDegradedWarning


class DeletionState(str, Enum):
    IDLE = "idle"
    PREVIEW_REQUESTED = "preview_requested"
    PREVIEW_READY = "preview_ready"
    PREVIEW_FAILED = "preview_failed"
    DELETE_CONFIRMED = "delete_confirmed"
    DELETED = "deleted"
    DELETE_FAILED = "delete_failed"
    VERIFIED = "verified"


class PreviewSource(str, Enum):
    AUTHORITATIVE = "authoritative"
    MANUAL = "manual"


@dataclass(frozen=True)
class DeletionPreviewEntry:
    table_name: str
    records_affected: int
    data_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "records_affected": self.records_affected,
            "data_type": self.data_type,
        }


@dataclass(frozen=True)
class AuthoritativePreview:
    """Preview produced by the store's aggregate cascade operation."""
    record_id: str
    entries: Tuple[DeletionPreviewEntry, ...] = ()

    source = PreviewSource.AUTHORITATIVE

    @property
    def total_records(self) -> int:
        return sum(e.records_affected for e in self.entries)


@dataclass(frozen=True)
class ManualPreview:
    """
    Best-effort preview built by counting each known dependent table.

    Only as complete as the enumeration list; the warning says so.
    """
    record_id: str
    entries: Tuple[DeletionPreviewEntry, ...] = ()
    warning: PreviewDegradedWarning = field(
        default_factory=lambda: PreviewDegradedWarning(
            "Preview was built by manual per-table enumeration and may miss dependent tables"
        ),
        compare=False
    )

    source = PreviewSource.MANUAL

    @property
    def total_records(self) -> int:
        return sum(e.records_affected for e in self.entries)


DeletionPreview = Union[AuthoritativePreview, ManualPreview]


@dataclass(frozen=True)
class DeletionAuditRecord:
    record_id: str
    email: Optional[str]
    user_code: Optional[str]
    deleted_at: datetime
    preview: Optional[DeletionPreview]
    actor_id: str
    snapshot: Optional[Dict[str, List[Dict[str, Any]]]] = None

    @property
    def preview_source(self) -> Optional[str]:
        return self.preview.source.value if self.preview is not None else None

    def affected_tables(self) -> List[Dict[str, Any]]:
        if self.preview is None:
            return []
        return [entry.to_dict() for entry in self.preview.entries]

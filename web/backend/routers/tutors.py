#!/usr/bin/env python3
"""
Tutor account endpoints - deletion preview and cascading delete.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.deletion import DeletionOrchestrator
from ..config import get_config
from ..dependencies import get_current_actor, get_deletion_orchestrator
from ..models.responses import (
    DeletedUser,
    DeletionPreviewItem,
    DeletionPreviewResponse,
    DeletionResponse,
)

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/tutors", tags=["tutors"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": str(exc),
            "type": "RateLimitExceeded"
        }
    )


def validate_uuid(user_id: str) -> str:
    """Validate that user_id is a valid UUID format."""
    try:
        uuid.UUID(user_id)
        return user_id
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid user_id format: {user_id}. Must be a valid UUID."
        )


def _items(entries):
    return [DeletionPreviewItem(**entry.to_dict()) for entry in entries]


@router.get("/{user_id}/delete-preview", response_model=DeletionPreviewResponse)
def get_delete_preview(
    user_id: str,
    orchestrator: DeletionOrchestrator = Depends(get_deletion_orchestrator)
):
    """
    Show every table a delete of this user would touch, with row counts.

    source is "authoritative" when the database preview function answered,
    "manual" when the rows were counted table by table.
    """
    validate_uuid(user_id)
    preview = orchestrator.preview_deletion(user_id)

    warning = getattr(preview, 'warning', None)
    return DeletionPreviewResponse(
        success=True,
        user_id=user_id,
        source=preview.source.value,
        warning=str(warning) if warning is not None else None,
        total_records=preview.total_records,
        preview=_items(preview.entries),
    )


@router.delete("/{user_id}", response_model=DeletionResponse)
@limiter.limit(get_config().deletion.delete_rate_limit)
def delete_tutor(
    request: Request,
    user_id: str,
    actor_id: str = Depends(get_current_actor),
    orchestrator: DeletionOrchestrator = Depends(get_deletion_orchestrator)
):
    """
    Delete the user and everything that cascades from users_universal.

    Fails with 409 when a foreign key is not configured for cascade; the
    message names the constraint and the script that fixes it.
    """
    validate_uuid(user_id)
    record = orchestrator.confirm_deletion(user_id, actor_id)

    return DeletionResponse(
        success=True,
        message=f"User {record.email} ({record.user_code}) successfully deleted",
        deleted_user=DeletedUser(id=record.record_id, email=record.email, user_code=record.user_code),
        deleted_by=record.actor_id,
        deleted_at=record.deleted_at.isoformat(),
        preview_source=record.preview_source,
        cascade_impact=_items(record.preview.entries) if record.preview is not None else [],
    )

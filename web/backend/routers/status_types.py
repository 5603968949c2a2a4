#!/usr/bin/env python3
"""
Tutor status type lookup for form dropdowns.
"""

import logging
from fastapi import APIRouter, Depends

from database.repositories import TutorStatusTypeRepository
from ..dependencies import get_status_type_repository
from ..models.responses import StatusTypeOption, StatusTypesResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tutor-status-types", tags=["tutors"])


@router.get("", response_model=StatusTypesResponse)
def list_tutor_status_types(
    repo: TutorStatusTypeRepository = Depends(get_status_type_repository)
):
    options = repo.list_status_types()
    return StatusTypesResponse(
        success=True,
        count=len(options),
        data=[StatusTypeOption(**option) for option in options],
    )

#!/usr/bin/env python3
"""
Error handlers mapping domain exceptions to JSON responses.

Every error body has the shape {"success": false, "error": ..., "type": ...}.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.exceptions import (
    ConstraintError,
    EduprimaError,
    NotFoundError,
    SchemaMismatchError,
    ValidationError,
    VerificationFailedError,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": str(exc),
            "type": exc.__class__.__name__
        }
    )


def status_code_for(exc: EduprimaError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConstraintError):
        return 409
    if isinstance(exc, (VerificationFailedError, SchemaMismatchError)):
        return 500
    return 500


async def service_exception_handler(
    request: Request,
    exc: EduprimaError
) -> JSONResponse:
    """
    Handle service layer exceptions.

    Validation and not-found outcomes are expected and only logged at info.
    ConstraintError messages are returned verbatim since they name the fix.
    """
    status_code = status_code_for(exc)
    if status_code < 500 and not isinstance(exc, ConstraintError):
        logger.info(f"{request.method} {request.url.path}: {exc}")
    else:
        logger.error(f"Service error in {request.url.path}: {exc}")

    return _error_response(status_code, exc)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )

#!/usr/bin/env python3
"""
Domain exceptions shared by the matchmaking and deletion services.

ValidationError and NotFoundError are expected, user-facing outcomes.
ConstraintError, VerificationFailedError and SchemaMismatchError point at a
backend misconfiguration and are logged at error level where they are raised.
"""

from typing import Optional


class EduprimaError(Exception):
    """Base exception for service layer errors."""
    pass


class ValidationError(EduprimaError):
    """Raised when a query or weight profile is malformed."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class NotFoundError(EduprimaError):
    """Raised when the target record does not exist."""

    def __init__(self, record_id: str, table: str = "users_universal"):
        self.record_id = record_id
        self.table = table
        super().__init__(f"Record {record_id} not found in {table}")


class ConstraintError(EduprimaError):
    """Raised when the store rejects a delete because cascade is not configured."""

    def __init__(self, constraint: str, table: str, guidance: str):
        self.constraint = constraint
        self.table = table
        self.guidance = guidance
        super().__init__(
            f'CASCADE DELETE not configured! Foreign key constraint "{constraint}" '
            f'on table "{table}" is blocking deletion. {guidance}'
        )


class VerificationFailedError(EduprimaError):
    """Raised when a record is still readable after a reported-successful delete."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Delete verification failed - record {record_id} still exists")


class DeletionFailedError(EduprimaError):
    """Raised when the store fails the delete for a reason other than a constraint."""
    pass


class SchemaMismatchError(EduprimaError):
    """Raised when the database does not match the declared schema contract."""

    def __init__(self, message: str, missing: Optional[dict] = None):
        self.missing = missing or {}
        super().__init__(message)


class PreviewDegradedWarning(UserWarning):
    """Attached to a deletion preview built by manual per-table enumeration."""
    pass

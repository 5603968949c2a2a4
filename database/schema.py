#!/usr/bin/env python3
"""
Schema contract - the exact tables and columns the services read.

Bump SCHEMA_VERSION whenever EXPECTED_SCHEMA changes. The deletion preview
enumeration (core.deletion.dependents) is part of the same contract.
"""

import logging
from typing import Dict, Tuple

from sqlalchemy import inspect

from core.exceptions import SchemaMismatchError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "2024.1"

EXPECTED_SCHEMA: Dict[str, Tuple[str, ...]] = {
    'users_universal': ('id', 'email', 'user_code'),
    'user_profiles': ('user_id', 'full_name'),
    'user_addresses': ('user_id',),
    'user_demographics': ('user_id',),
    'educator_details': (
        'id', 'user_id', 'experience_summary', 'hourly_rate', 'rating', 'latitude', 'longitude',
    ),
    'tutor_availability_config': ('tutor_id', 'available_days'),
    'tutor_teaching_preferences': ('tutor_id', 'teaching_methods'),
    'tutor_personality_traits': ('tutor_id',),
    'programs_unit': ('id', 'program_name'),
    'tutor_program_mappings': ('tutor_id', 'program_id'),
    'tutor_banking_info': ('tutor_id',),
    'tutor_management': ('user_id', 'status_tutor'),
    'tutor_status_types': ('value', 'label', 'sort_order'),
    'document_storage': ('user_id',),
    'user_deletion_audit': (
        'deleted_user_id', 'deleted_email', 'deleted_user_code', 'deleted_by',
        'deleted_at', 'preview_source', 'affected_tables', 'snapshot',
    ),
}


def find_schema_gaps(engine) -> Dict[str, Tuple[str, ...]]:
    """Return {table: missing columns}; a missing table maps to all its expected columns."""
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())

    gaps = {}
    for table, columns in EXPECTED_SCHEMA.items():
        if table not in existing_tables:
            gaps[table] = columns
            continue
        present = {col['name'] for col in inspector.get_columns(table)}
        missing = tuple(c for c in columns if c not in present)
        if missing:
            gaps[table] = missing
    return gaps


def verify_schema(engine) -> None:
    gaps = find_schema_gaps(engine)
    if gaps:
        details = "; ".join(f"{table}: {', '.join(cols)}" for table, cols in gaps.items())
        logger.error(f"Schema {SCHEMA_VERSION} check failed - missing {details}")
        raise SchemaMismatchError(
            f"Database does not match schema {SCHEMA_VERSION}. Missing {details}",
            missing=gaps
        )
    logger.info(f"Schema {SCHEMA_VERSION} verified ({len(EXPECTED_SCHEMA)} tables)")

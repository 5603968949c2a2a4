"""
Tables removed together with a user account, in preview display order.

The order is part of the schema contract (database.schema.SCHEMA_VERSION):
change it only together with the schema and the preview_user_deletion
function in migrations/001_cascade_user_deletion.py.
"""

from dataclasses import dataclass
from typing import Tuple

CORE_TABLE = "users_universal"
EDUCATOR_TABLE = "educator_details"

# Which id a dependent table is keyed on
KEY_USER = "user"
KEY_EDUCATOR = "educator"


@dataclass(frozen=True)
class DependentTable:
    table: str
    column: str
    key: str
    label: str


DEPENDENT_TABLES: Tuple[DependentTable, ...] = (
    DependentTable(CORE_TABLE, "id", KEY_USER, "User Account"),
    DependentTable("user_profiles", "user_id", KEY_USER, "Personal Profile"),
    DependentTable("user_addresses", "user_id", KEY_USER, "Addresses"),
    DependentTable("user_demographics", "user_id", KEY_USER, "Demographics"),
    DependentTable(EDUCATOR_TABLE, "user_id", KEY_USER, "Educator Profile"),
    DependentTable("tutor_availability_config", "tutor_id", KEY_EDUCATOR, "Schedule Config"),
    DependentTable("tutor_teaching_preferences", "tutor_id", KEY_EDUCATOR, "Teaching Preferences"),
    DependentTable("tutor_personality_traits", "tutor_id", KEY_EDUCATOR, "Personality Profile"),
    DependentTable("tutor_program_mappings", "tutor_id", KEY_EDUCATOR, "Subject Mappings"),
    DependentTable("tutor_banking_info", "tutor_id", KEY_EDUCATOR, "Banking Information"),
    DependentTable("tutor_management", "user_id", KEY_USER, "Management Data"),
    DependentTable("document_storage", "user_id", KEY_USER, "Documents"),
)

# Rows copied into the audit snapshot before delete
SNAPSHOT_TABLES: Tuple[str, ...] = (
    CORE_TABLE,
    "user_profiles",
    EDUCATOR_TABLE,
    "user_addresses",
    "user_demographics",
    "document_storage",
)

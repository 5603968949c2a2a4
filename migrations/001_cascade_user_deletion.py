#!/usr/bin/env python3
"""
Migration: Cascade configuration and deletion preview for user accounts

This migration:
1. Re-creates the foreign keys that reference users_universal (and
   educator_details) with ON DELETE CASCADE
2. Switches the tutor_management audit columns (created_by, updated_by)
   to ON DELETE SET NULL so deleting an admin never removes tutors
3. Installs preview_user_deletion(p_user_id uuid), the aggregate preview
   used before an account delete
4. Creates the user_deletion_audit table

Date: 2024-11-04
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import create_engine, text
from database.database import DATABASE_URL

# (table, column, referenced table, on delete)
CASCADE_FOREIGN_KEYS = [
    ('user_profiles', 'user_id', 'users_universal', 'CASCADE'),
    ('user_addresses', 'user_id', 'users_universal', 'CASCADE'),
    ('user_demographics', 'user_id', 'users_universal', 'CASCADE'),
    ('educator_details', 'user_id', 'users_universal', 'CASCADE'),
    ('tutor_availability_config', 'tutor_id', 'educator_details', 'CASCADE'),
    ('tutor_teaching_preferences', 'tutor_id', 'educator_details', 'CASCADE'),
    ('tutor_personality_traits', 'tutor_id', 'educator_details', 'CASCADE'),
    ('tutor_program_mappings', 'tutor_id', 'educator_details', 'CASCADE'),
    ('tutor_banking_info', 'tutor_id', 'educator_details', 'CASCADE'),
    ('tutor_management', 'user_id', 'users_universal', 'CASCADE'),
    ('tutor_management', 'created_by', 'users_universal', 'SET NULL'),
    ('tutor_management', 'updated_by', 'users_universal', 'SET NULL'),
    ('document_storage', 'user_id', 'users_universal', 'CASCADE'),
]

PREVIEW_FUNCTION_SQL = """
CREATE OR REPLACE FUNCTION preview_user_deletion(p_user_id uuid)
RETURNS TABLE(table_name text, records_affected bigint, data_type text)
LANGUAGE plpgsql STABLE AS $$
DECLARE
    v_tutor_ids uuid[];
BEGIN
    SELECT coalesce(array_agg(e.id), '{}') INTO v_tutor_ids
    FROM educator_details e WHERE e.user_id = p_user_id;

    RETURN QUERY
    SELECT t.table_name, t.records_affected, t.data_type FROM (
        SELECT 0 AS ord, 'users_universal'::text AS table_name,
               (SELECT count(*) FROM users_universal WHERE id = p_user_id) AS records_affected,
               'User Account'::text AS data_type
        UNION ALL SELECT 1, 'user_profiles',
               (SELECT count(*) FROM user_profiles WHERE user_id = p_user_id), 'Personal Profile'
        UNION ALL SELECT 2, 'user_addresses',
               (SELECT count(*) FROM user_addresses WHERE user_id = p_user_id), 'Addresses'
        UNION ALL SELECT 3, 'user_demographics',
               (SELECT count(*) FROM user_demographics WHERE user_id = p_user_id), 'Demographics'
        UNION ALL SELECT 4, 'educator_details',
               (SELECT count(*) FROM educator_details WHERE user_id = p_user_id), 'Educator Profile'
        UNION ALL SELECT 5, 'tutor_availability_config',
               (SELECT count(*) FROM tutor_availability_config WHERE tutor_id = ANY(v_tutor_ids)), 'Schedule Config'
        UNION ALL SELECT 6, 'tutor_teaching_preferences',
               (SELECT count(*) FROM tutor_teaching_preferences WHERE tutor_id = ANY(v_tutor_ids)), 'Teaching Preferences'
        UNION ALL SELECT 7, 'tutor_personality_traits',
               (SELECT count(*) FROM tutor_personality_traits WHERE tutor_id = ANY(v_tutor_ids)), 'Personality Profile'
        UNION ALL SELECT 8, 'tutor_program_mappings',
               (SELECT count(*) FROM tutor_program_mappings WHERE tutor_id = ANY(v_tutor_ids)), 'Subject Mappings'
        UNION ALL SELECT 9, 'tutor_banking_info',
               (SELECT count(*) FROM tutor_banking_info WHERE tutor_id = ANY(v_tutor_ids)), 'Banking Information'
        UNION ALL SELECT 10, 'tutor_management',
               (SELECT count(*) FROM tutor_management WHERE user_id = p_user_id), 'Management Data'
        UNION ALL SELECT 11, 'document_storage',
               (SELECT count(*) FROM document_storage WHERE user_id = p_user_id), 'Documents'
    ) t
    WHERE t.records_affected > 0
    ORDER BY t.ord;
END;
$$;
"""

# Drops every FK on (table, column) before re-adding it, which also removes duplicates
REPLACE_FOREIGN_KEY_SQL = """
DO $$
DECLARE
    r record;
BEGIN
    FOR r IN
        SELECT con.conname
        FROM pg_constraint con
        JOIN pg_attribute att ON att.attrelid = con.conrelid AND att.attnum = ANY(con.conkey)
        WHERE con.contype = 'f'
          AND con.conrelid = '{table}'::regclass
          AND att.attname = '{column}'
    LOOP
        EXECUTE format('ALTER TABLE {table} DROP CONSTRAINT %I', r.conname);
    END LOOP;
    ALTER TABLE {table} ADD CONSTRAINT {table}_{column}_fkey
        FOREIGN KEY ({column}) REFERENCES {referenced}(id) ON DELETE {on_delete};
END
$$;
"""


def migrate():
    """Configure cascade foreign keys, install the preview function and audit table."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        for table, column, referenced, on_delete in CASCADE_FOREIGN_KEYS:
            conn.execute(text(REPLACE_FOREIGN_KEY_SQL.format(
                table=table, column=column, referenced=referenced, on_delete=on_delete
            )))

        conn.execute(text(PREVIEW_FUNCTION_SQL))

        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS user_deletion_audit (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                deleted_user_id UUID NOT NULL,
                deleted_email TEXT,
                deleted_user_code TEXT,
                deleted_by TEXT NOT NULL,
                deleted_at TIMESTAMPTZ NOT NULL DEFAULT timezone('UTC', now()),
                deletion_method TEXT NOT NULL DEFAULT 'cascade_api',
                preview_source TEXT,
                affected_tables JSONB,
                snapshot JSONB
            )
        """))

        conn.execute(text("""
            CREATE INDEX IF NOT EXISTS idx_user_deletion_audit_user ON user_deletion_audit (deleted_user_id)
        """))

        conn.execute(text("""
            CREATE INDEX IF NOT EXISTS idx_user_deletion_audit_deleted_at ON user_deletion_audit (deleted_at)
        """))

        conn.commit()
        print(f"Successfully configured {len(CASCADE_FOREIGN_KEYS)} foreign keys")
        print("Successfully installed preview_user_deletion(uuid)")
        print("Successfully created user_deletion_audit table")


def rollback():
    """Drop the preview function and audit table. Foreign keys are left as they are."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        conn.execute(text("DROP FUNCTION IF EXISTS preview_user_deletion(uuid)"))
        conn.execute(text("DROP TABLE IF EXISTS user_deletion_audit"))

        conn.commit()
        print("Successfully dropped preview_user_deletion and user_deletion_audit")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Migration for cascade user deletion")
    parser.add_argument("--rollback", action="store_true", help="Rollback the migration")

    args = parser.parse_args()

    if args.rollback:
        rollback()
    else:
        migrate()

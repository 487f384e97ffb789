"""
Seed Roles, Governed Tables and Role Permissions Script
This script populates permissoes, permission_tables and role_table_permissions
from the config. Every write is an upsert on the table's natural key, so it can
run repeatedly (manually or as a nightly job) without creating duplicates.
Grants already present are left alone, so matrix edits made by administrators
survive a re-run. Existing user overrides are never touched.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from backoffice.config.permissions_config import ROLES, GOVERNED_TABLES, ROLE_MATRIX
from backoffice.database.supabase_client import SupabaseClient
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_roles(supabase: Client) -> int:
    """Seed role levels from config"""
    logger.info("Seeding roles...")
    rows = [{"level": level} for level in ROLES]
    result = supabase.table("permissoes").upsert(rows, on_conflict="level").execute()
    count = len(result.data or [])
    logger.info(f"Roles seeded: {count}")
    return count


def seed_tables(supabase: Client) -> int:
    """Seed governed tables from config"""
    logger.info("Seeding governed tables...")
    rows = [
        {"table_name": name, "display_name": meta["display_name"], "description": meta["description"]}
        for name, meta in GOVERNED_TABLES.items()
    ]
    result = supabase.table("permission_tables").upsert(rows, on_conflict="table_name").execute()
    count = len(result.data or [])
    logger.info(f"Governed tables seeded: {count}")
    return count


def seed_role_permissions(supabase: Client) -> int:
    """Seed the default role x table matrix. Existing grants are administrator-owned and kept as they are."""
    logger.info("Seeding role permissions...")
    count = 0
    for row in ROLE_MATRIX:
        try:
            supabase.table("role_table_permissions")\
                .upsert(row, on_conflict="role,table_name", ignore_duplicates=True)\
                .execute()
            count += 1
            logger.debug(f"Saved grant {row['role']}/{row['table_name']}")
        except Exception as e:
            logger.error(f"Error saving grant {row['role']}/{row['table_name']}: {e}")
    logger.info(f"Role permissions seeded: {count}/{len(ROLE_MATRIX)}")
    return count


def run_seed(supabase: Client) -> dict:
    # Roles and tables first; grants reference both
    return {
        "roles": seed_roles(supabase),
        "tables": seed_tables(supabase),
        "grants": seed_role_permissions(supabase),
    }


def main():
    """Main function to seed roles, tables and grants"""
    try:
        supabase = SupabaseClient.get_service_client()

        logger.info("Starting permissions seeding...")
        totals = run_seed(supabase)

        logger.info("Seeding completed successfully!")
        logger.info(f"Total: {totals['roles']} roles, {totals['tables']} tables, {totals['grants']} grants processed")

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

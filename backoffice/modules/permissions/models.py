# Supabase tables: role_table_permissions, user_table_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

role_table_permissions:
- id: uuid (primary key)
- role: text (not null) - a permissoes.level value
- table_name: text (not null) - a permission_tables.table_name value
- can_create, can_read, can_update, can_delete: boolean (not null, default false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique constraint on (role, table_name)

user_table_permissions:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- table_name: text (not null)
- can_create, can_read, can_update, can_delete: boolean (not null, default false)
- created_by: uuid (nullable) - admin who wrote the override
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique constraint on (user_id, table_name)

Both unique constraints are the on_conflict targets of the upserts in
service.py: every write replaces all four flags in one statement.
A user_table_permissions row replaces the role grant for that user/table
pair as a whole. Deleting it restores the role grant.
"""

# Supabase tables: permissoes, user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

permissoes:
- id: uuid (primary key)
- level: text (not null, unique) - e.g., "admin", "operador", "franqueado", "user"

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null, unique)
- role: text (not null) - a permissoes.level value
- created_at: timestamp (default: now())

The unique constraint on user_roles.user_id is the conflict target for
role assignment upserts: a second assignment replaces the first.
A user without a user_roles row has no role and resolves to deny-all.
"""

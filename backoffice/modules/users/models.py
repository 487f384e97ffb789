# Supabase tables: profiles, user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, unique)
- full_name: text (not null)
- email: text (nullable) - synced from auth.users
- phone_number: text (nullable)
- status: text ("ativo" | "inativo")
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Profiles are maintained by the user management screens; this service only
reads them to list users next to their role and permission matrix.
"""

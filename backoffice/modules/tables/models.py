# Supabase table: permission_tables
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

permission_tables:
- id: uuid (primary key)
- table_name: text (not null, unique) - logical name of a governed table, e.g. "senhas"
- display_name: text (not null) - e.g. "Senhas"
- description: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""

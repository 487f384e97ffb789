# Supabase tables: audit_log, profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

audit_log:
- id: uuid (primary key)
- timestamp: timestamptz (default: now()) - commit time of the audit row
- user_id: uuid (not null) - actor of the governed mutation
- action: action_type enum ("create", "read", "update", "delete")
- table_name: text (not null)
- record_id: text (not null)
- old_record_data: jsonb (nullable) - row before the mutation, absent on create
- new_record_data: jsonb (nullable) - row after the mutation, absent on delete

Rows are insert-only: no update or delete policy exists on audit_log.

profiles (identity data, owned by the user management screens):
- user_id: uuid (references auth.users.id)
- full_name: text

user_full_name is joined from profiles when logs are listed, so entries
always show the actor's current name.
"""

# Supabase table: user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id ON DELETE CASCADE, not null)
- group_id: uuid (foreign key to groups.id ON DELETE CASCADE, nullable)
    NULL means global scope; the only global role is 'admin'
- role: app_role enum (not null) - values: owner, admin, member
- created_at: timestamptz (default: now())
- unique constraint on (user_id, group_id)

Postgres treats NULLs as distinct in unique constraints, so global rows are
written with select-then-update instead of upsert.
"""

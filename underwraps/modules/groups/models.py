# Supabase tables: groups, group_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null) - 1..200 chars, control characters stripped
- owner_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamptz (default: now())

group_members:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id ON DELETE CASCADE, not null)
- user_id: uuid (foreign key to auth.users.id ON DELETE CASCADE, not null)
- created_at: timestamptz (default: now())
- unique constraint on (group_id, user_id)

Deleting a group row cascades in the database to group_members, user_roles,
wishlists (and through them items and item_claims), item_claims and
invitations, so a single DELETE on groups is atomic.
"""

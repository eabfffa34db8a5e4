# Supabase table: wishlists
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

wishlists:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id ON DELETE CASCADE, not null) - owner
- group_id: uuid (foreign key to groups.id ON DELETE CASCADE, not null)
- name: text (not null) - max 200 chars
- is_default: boolean (default: false) - true for the owner's first wishlist in the group
- created_at: timestamptz (default: now())
- unique constraint on (user_id, group_id, name)

Deleting a wishlist cascades to items and, through them, item_claims.
"""

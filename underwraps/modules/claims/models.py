# Supabase table: item_claims
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

item_claims:
- id: uuid (primary key)
- item_id: uuid (foreign key to items.id ON DELETE CASCADE, not null)
- claimer_id: uuid (foreign key to auth.users.id ON DELETE CASCADE, not null)
- group_id: uuid (foreign key to groups.id ON DELETE CASCADE, not null)
- reveal_date: date (not null) - the wishlist owner sees the claim from this UTC date on
- note: text (nullable) - max 1000 chars
- created_at: timestamptz (default: now())
- unique constraint on (item_id, claimer_id)

Single-claim items (allow_multiple_claims = false) are limited to one claim in
the service layer; the earliest claim wins when two inserts race.
"""

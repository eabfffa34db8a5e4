# Supabase table: items
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

items:
- id: uuid (primary key)
- wishlist_id: uuid (foreign key to wishlists.id ON DELETE CASCADE, not null)
- title: text (not null) - max 500 chars
- url: text (nullable) - max 2048 chars
- price: numeric(12,2) (nullable) - >= 0
- currency: text (default: 'USD')
- image_url: text (nullable) - max 2048 chars
- note: text (nullable) - max 1000 chars
- quantity: int (not null, default: 1)
- allow_multiple_claims: boolean (not null, default: false)
- created_at: timestamptz (default: now())

Deleting an item cascades to its item_claims.
"""

# Supabase table: invitations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

invitations:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id ON DELETE CASCADE, not null)
- inviter_id: uuid (foreign key to auth.users.id, not null)
- invitee_email: text (not null) - stored exactly as entered, max 255 chars
- token: uuid (not null, unique) - issued once, never reissued or returned by validation
- status: text (not null, default: 'pending') - values: pending, accepted
- created_at: timestamptz (default: now())
- expires_at: timestamptz (not null) - created_at + 7 days

"expired" is never stored: it is derived from expires_at at read time.
Token lookups run with the service role client because the invitee may not
have an account yet.
"""

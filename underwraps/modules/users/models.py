# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, foreign key to auth.users.id ON DELETE CASCADE)
- email: text (not null, unique)
- name: text (nullable)
- avatar_url: text (nullable)
- created_at: timestamptz (default: now())

A trigger on auth.users inserts the profile row at sign-up, so deleting the
auth user removes the profile and, through it, memberships, roles, wishlists
and claims.

The email column is protected: it leaves the service only through
users/masking.py.
"""

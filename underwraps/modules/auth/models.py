# Supabase Auth
# Sign-up, sign-in and session handling stay with Supabase Auth on the client.
# This service only verifies bearer tokens and performs admin deletions.

"""
Supabase Auth calls used here:
- auth.get_user(jwt=...) - Resolve the current user from an access token
- auth.admin.delete_user(user_id) - Remove an account (service role key)

app_metadata.type == "super_user" is set server-side and grants the
global-admin capability alongside a global 'admin' row in user_roles.
"""

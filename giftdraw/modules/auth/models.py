# Supabase Auth
# Identity comes from Supabase's built-in authentication (auth.users).
# The only thing this backend consumes is the authenticated caller's id and
# email, plus the display_name stored in user metadata at sign up.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (display_name goes in user metadata;
  a database trigger copies it into the profiles table)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users
"""

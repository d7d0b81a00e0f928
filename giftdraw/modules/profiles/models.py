# Supabase table: profiles
# Read-only here; rows are created by a trigger on auth.users sign up.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, unique, not null)
- email: text (not null)
- display_name: text (nullable)
- created_at: timestamp (default: now())
"""

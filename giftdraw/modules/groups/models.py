# Supabase tables: groups, group_members
# This file documents the expected database schema
# Actual operations are handled through the RowStore in service.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key)
- name: text (not null)
- code: text (not null) - 6 chars from ABCDEFGHJKLMNPQRSTUVWXYZ23456789
- created_by: uuid (foreign key to auth.users.id, not null) - owner
- is_drawn: boolean (not null, default: false)
- created_at: timestamp (default: now())

group_members:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- user_email: text (snapshot at join time)
- user_name: text (snapshot at join time)
- assigned_to: uuid (nullable) - user_id of the member this one gives to
- unique constraint on (group_id, user_id)

Members are deleted before their group so no orphan rows remain.
"""

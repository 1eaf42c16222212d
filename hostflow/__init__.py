"""
HostFlow cloud sync.

Signs users in against Supabase and keeps each user's application state in
a single JSON vault row.
"""

__version__ = "1.0.0"

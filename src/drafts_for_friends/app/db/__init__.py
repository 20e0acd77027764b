"""Hosted (Supabase/PostgREST) store backends."""

from .document_store import SupabaseDocumentStore
from .errors import (
    SupabaseAuthError,
    SupabaseConflictError,
    SupabaseError,
    SupabaseNotFoundError,
)
from .expiring_store import SupabaseExpiringStore
from .supabase_client import SupabaseClient

__all__ = [
    "SupabaseAuthError",
    "SupabaseClient",
    "SupabaseConflictError",
    "SupabaseDocumentStore",
    "SupabaseError",
    "SupabaseExpiringStore",
    "SupabaseNotFoundError",
]

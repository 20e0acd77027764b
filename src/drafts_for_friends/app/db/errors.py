"""PostgREST error hierarchy for the hosted store backends.

Kept small and dependency-free so callers never see httpx.Response objects
(or the service-role key).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SupabaseError(Exception):
    """Base error for PostgREST requests."""

    status_code: int
    message: str
    code: str | None = None
    details: str | None = None

    def __str__(self) -> str:
        bits: list[str] = [f"SupabaseError(status={self.status_code})", self.message]
        if self.code:
            bits.append(f"code={self.code}")
        if self.details:
            bits.append(f"details={self.details}")
        return " ".join(bits)

    @property
    def is_server_error(self) -> bool:
        """5xx: the backend failed, as opposed to refusing the request."""
        return self.status_code >= 500


class SupabaseAuthError(SupabaseError):
    """401/403: bad service key or row-level security refusal."""


class SupabaseNotFoundError(SupabaseError):
    """404: missing table or route."""


class SupabaseConflictError(SupabaseError):
    """409: unique violation."""

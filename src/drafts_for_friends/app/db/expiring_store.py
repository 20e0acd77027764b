"""PostgREST-backed expiring key-value store.

Table layout::

    create table share_transients (
        key        text primary key,
        value      jsonb not null,
        expires_at timestamptz not null
    );

PostgreSQL has no native TTL, so expiry is enforced on read: ``get``
only returns rows whose ``expires_at`` is still in the future. Expired
rows are physically removed by ``purge_expired``.

Failure mapping:
  - Transport errors and 5xx answers raise ``StoreUnavailable``.
  - Refused writes/deletes (4xx) return False, matching the protocol.
  - A TTL that lands outside the timestamp range is a refused write.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from ..protocols import StoreUnavailable
from .errors import SupabaseError
from .supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "share_transients"


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


class SupabaseExpiringStore:
    """ExpiringStore over a PostgREST table."""

    def __init__(
        self,
        client: SupabaseClient,
        *,
        table: str = DEFAULT_TABLE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._table = table
        self._clock = clock

    async def get(self, key: str) -> Any | None:
        try:
            rows = await self._client.select(
                self._table,
                filters={
                    "key": ("eq", key),
                    "expires_at": ("gt", _iso(self._clock())),
                },
                columns="value",
                limit=1,
            )
        except (SupabaseError, httpx.HTTPError) as exc:
            raise StoreUnavailable(f"get failed: {type(exc).__name__}") from exc
        return rows[0].get("value") if rows else None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        if ttl_seconds <= 0:
            return False
        try:
            expires_at = _iso(self._clock() + ttl_seconds)
        except (OverflowError, ValueError, OSError):
            logger.warning("Expiring store refused write for %s (ttl out of range)", key)
            return False
        row = {"key": key, "value": value, "expires_at": expires_at}
        try:
            rows = await self._client.upsert(self._table, row)
        except SupabaseError as exc:
            if exc.is_server_error:
                raise StoreUnavailable(f"set failed: {exc.status_code}") from exc
            logger.warning("Expiring store refused write for %s (status=%s)", key, exc.status_code)
            return False
        except httpx.HTTPError as exc:
            raise StoreUnavailable(f"set failed: {type(exc).__name__}") from exc
        return len(rows) > 0

    async def delete(self, key: str) -> bool:
        try:
            rows = await self._client.delete(self._table, {"key": ("eq", key)})
        except SupabaseError as exc:
            if exc.is_server_error:
                raise StoreUnavailable(f"delete failed: {exc.status_code}") from exc
            logger.warning("Expiring store refused delete for %s (status=%s)", key, exc.status_code)
            return False
        except httpx.HTTPError as exc:
            raise StoreUnavailable(f"delete failed: {type(exc).__name__}") from exc
        return len(rows) > 0

    async def purge_expired(self) -> int:
        """Delete rows whose expiry has passed. Returns how many were removed."""
        try:
            rows = await self._client.delete(
                self._table,
                {"expires_at": ("lte", _iso(self._clock()))},
            )
        except (SupabaseError, httpx.HTTPError) as exc:
            raise StoreUnavailable(f"purge failed: {type(exc).__name__}") from exc
        if rows:
            logger.info("Purged %d expired share records", len(rows))
        return len(rows)

"""PostgREST-backed document lookup.

Reads ``documents(id, title, status, content)``. The share core never
writes documents.
"""

from __future__ import annotations

from typing import Any, Sequence

import httpx

from ..protocols import Document, StoreUnavailable
from .errors import SupabaseError
from .supabase_client import SupabaseClient

DEFAULT_TABLE = "documents"


def _row_to_document(row: dict[str, Any]) -> Document:
    return Document(
        id=str(row["id"]),
        title=row.get("title") or "",
        status=row.get("status") or "",
        content=row.get("content") or "",
    )


class SupabaseDocumentStore:
    def __init__(self, client: SupabaseClient, *, table: str = DEFAULT_TABLE) -> None:
        self._client = client
        self._table = table

    async def get_by_id(self, document_id: str) -> Document | None:
        try:
            rows = await self._client.select(
                self._table,
                filters={"id": ("eq", document_id)},
                limit=1,
            )
        except (SupabaseError, httpx.HTTPError) as exc:
            raise StoreUnavailable(f"document lookup failed: {type(exc).__name__}") from exc
        return _row_to_document(rows[0]) if rows else None

    async def list_by_status(self, statuses: Sequence[str]) -> list[Document]:
        try:
            rows = await self._client.select(
                self._table,
                filters={"status": ("in", tuple(statuses))},
                order="title.asc",
            )
        except (SupabaseError, httpx.HTTPError) as exc:
            raise StoreUnavailable(f"document listing failed: {type(exc).__name__}") from exc
        return [_row_to_document(row) for row in rows]

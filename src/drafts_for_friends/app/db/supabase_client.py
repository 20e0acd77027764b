"""Async PostgREST client for the hosted share and document tables.

Both hosted stores go through ``SupabaseClient``; it is the only code that
touches the Supabase REST endpoint or the service-role key. Three calls are
supported, which is everything the stores need:

  select  GET    /rest/v1/<table>?<filters>&select=<cols>
  upsert  POST   /rest/v1/<table>   Prefer: resolution=merge-duplicates
  delete  DELETE /rest/v1/<table>?<filters>

Filters are ``{column: (operator, value)}``; a bare value means ``eq``.
Every call asks for ``return=representation`` so callers can tell how many
rows were touched.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from .errors import (
    SupabaseAuthError,
    SupabaseConflictError,
    SupabaseError,
    SupabaseNotFoundError,
)

Filters = Mapping[str, Any]
Rows = list[dict[str, Any]]

_RETURN_ROWS = "return=representation"
_MERGE_DUPLICATES = "resolution=merge-duplicates"

_ERRORS_BY_STATUS: dict[int, type[SupabaseError]] = {
    401: SupabaseAuthError,
    403: SupabaseAuthError,
    404: SupabaseNotFoundError,
    409: SupabaseConflictError,
}


def _format_operand(op: str, value: Any) -> str:
    if op == "in":
        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            raise ValueError("in operator requires an iterable of values")
        items = (f'"{v}"' if isinstance(v, str) else str(v) for v in value)
        return f"({','.join(items)})"
    if value is None:
        raise ValueError(f"{op} does not support None")
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def encode_filters(filters: Filters | None) -> dict[str, str]:
    """``{"key": ("eq", "x")}`` -> ``{"key": "eq.x"}``."""
    params: dict[str, str] = {}
    for column, condition in (filters or {}).items():
        op, value = condition if isinstance(condition, tuple) and len(condition) == 2 else ("eq", condition)
        params[str(column)] = f"{op}.{_format_operand(str(op), value)}"
    return params


def error_from_response(resp: httpx.Response) -> SupabaseError:
    """Build the typed error for a failed PostgREST response."""
    message, code, details = resp.text, None, None
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message") or message
        code = payload.get("code")
        details = payload.get("details")

    error_cls = _ERRORS_BY_STATUS.get(resp.status_code, SupabaseError)
    return error_cls(
        status_code=resp.status_code,
        message=message,
        code=code,
        details=details,
    )


class SupabaseClient:
    """Service-role PostgREST client."""

    def __init__(
        self,
        *,
        supabase_url: str,
        service_role_key: str,
        schema: str = "public",
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        if not supabase_url:
            raise ValueError("supabase_url is required")
        if not service_role_key:
            raise ValueError("service_role_key is required")

        self._rest_url = f"{supabase_url.rstrip('/')}/rest/v1"
        self._service_role_key = service_role_key
        self._schema = schema
        self._timeout = float(timeout_seconds)
        self._http = http_client or httpx.AsyncClient()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def select(
        self,
        table: str,
        filters: Filters | None = None,
        *,
        columns: str = "*",
        limit: int | None = None,
        order: str | None = None,
    ) -> Rows:
        params = encode_filters(filters)
        params["select"] = columns
        if limit is not None:
            params["limit"] = str(int(limit))
        if order:
            params["order"] = order
        return await self._send("GET", table, params=params)

    async def upsert(self, table: str, row: Mapping[str, Any]) -> Rows:
        """Insert ``row``, or overwrite the row with the same primary key."""
        return await self._send(
            "POST",
            table,
            json=dict(row),
            prefer=f"{_RETURN_ROWS},{_MERGE_DUPLICATES}",
        )

    async def delete(self, table: str, filters: Filters) -> Rows:
        """Delete matching rows and return them. Unfiltered deletes are refused."""
        if not filters:
            raise ValueError("delete requires at least one filter")
        return await self._send(
            "DELETE",
            table,
            params=encode_filters(filters),
            prefer=_RETURN_ROWS,
        )

    def _headers(self, method: str, prefer: str | None) -> dict[str, str]:
        # Carries the service-role key; never log.
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
            "Accept-Profile": self._schema,
        }
        if method != "GET":
            headers["Content-Profile"] = self._schema
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _send(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Rows:
        resp = await self._http.request(
            method,
            f"{self._rest_url}/{table}",
            params=params,
            json=json,
            headers=self._headers(method, prefer),
            timeout=self._timeout,
        )
        if resp.status_code >= 400:
            raise error_from_response(resp)

        payload = resp.json()
        if not isinstance(payload, list):
            raise SupabaseError(
                status_code=502,
                message=f"{method} {table}: expected a JSON array",
            )
        return payload

"""Admin authentication for the share management endpoints.

Admin calls carry ``Authorization: Bearer <ADMIN_API_KEY>``. The key is
compared in constant time. With no key configured the guard rejects
everything, unless ``allow_anonymous`` is set (local development only).
"""

from __future__ import annotations

import hmac
from typing import Callable

from fastapi import HTTPException, Request

BEARER_PREFIX = 'Bearer '


def extract_bearer_token(request: Request) -> str | None:
    """Extract a Bearer token from the Authorization header."""
    auth_header = request.headers.get('authorization', '')
    if auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX):].strip()
    return None


def _unauthorized(code: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={
            'error': 'unauthorized',
            'code': code,
            'detail': 'Admin authentication required',
        },
        headers={'WWW-Authenticate': 'Bearer'},
    )


def create_admin_guard(
    admin_api_key: str,
    *,
    allow_anonymous: bool = False,
) -> Callable[[Request], None]:
    """Build a FastAPI dependency enforcing the admin key.

    Raises (from the dependency):
        HTTPException: 401 when the key is missing or wrong.
    """

    def require_admin(request: Request) -> None:
        if not admin_api_key:
            if allow_anonymous:
                return
            raise _unauthorized('admin_key_not_configured')

        presented = extract_bearer_token(request)
        if not presented:
            raise _unauthorized('no_credentials')
        if not hmac.compare_digest(presented.encode('utf-8'), admin_api_key.encode('utf-8')):
            raise _unauthorized('invalid_credentials')

    return require_admin

"""Share management endpoints for the admin page.

  GET  /admin/drafts           → shareable drafts + fresh action tokens
  POST /admin/drafts/share     → create a share
  POST /admin/drafts/extend    → extend a share
  POST /admin/drafts/unshare   → revoke a share

Mutations accept the admin form's flat parameter bag, either as
``application/x-www-form-urlencoded`` / ``multipart/form-data`` or as a
JSON object, and always
answer 200 with ``{"ok": bool, "code": str | null, "message": str}``. The
message is the status line the page shows above the listing; an admin
action never surfaces as an HTTP error beyond authentication.
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import APIRouter, Depends, Request

from ..protocols import ActionTokenValidator
from ..security.action_tokens import ADMIN_ACTIONS
from .errors import GrantOutcome
from .grants import GrantManager
from .messages import render_outcome


async def read_params(request: Request) -> dict[str, Any]:
    """Read the submitted parameter bag; an unreadable body is an empty bag."""
    content_type = request.headers.get('content-type', '')
    if 'application/json' in content_type:
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _outcome_body(outcome: GrantOutcome) -> dict[str, Any]:
    return {
        'ok': outcome.ok,
        'code': outcome.code.value if outcome.code else None,
        'message': render_outcome(outcome),
    }


def create_admin_router(
    manager: GrantManager,
    tokens: ActionTokenValidator,
    admin_guard: Callable[..., Any],
) -> APIRouter:
    """Create the admin share router.

    Args:
        manager: Grant manager performing the operations.
        tokens: Issues the per-action tokens embedded in the admin forms.
        admin_guard: FastAPI dependency rejecting non-admin callers.
    """
    router = APIRouter(
        prefix='/admin/drafts',
        tags=['admin-shares'],
        dependencies=[Depends(admin_guard)],
    )

    @router.get('')
    async def list_drafts():
        rows = await manager.list_shared_drafts()
        return {
            'drafts': [row.to_dict() for row in rows],
            'tokens': {action: tokens.issue(action) for action in ADMIN_ACTIONS},
        }

    @router.post('/share')
    async def create_share(request: Request):
        return _outcome_body(await manager.handle_create(await read_params(request)))

    @router.post('/extend')
    async def extend_share(request: Request):
        return _outcome_body(await manager.handle_extend(await read_params(request)))

    @router.post('/unshare')
    async def revoke_share(request: Request):
        return _outcome_body(await manager.handle_delete(await read_params(request)))

    return router

"""Security helpers: admin authentication and per-action form tokens."""

from .action_tokens import (
    ACTION_CREATE_SHARE,
    ACTION_DELETE_SHARE,
    ACTION_EXTEND_SHARE,
    ADMIN_ACTIONS,
    ActionTokenService,
)
from .admin_guard import create_admin_guard, extract_bearer_token

__all__ = [
    'ACTION_CREATE_SHARE',
    'ACTION_DELETE_SHARE',
    'ACTION_EXTEND_SHARE',
    'ADMIN_ACTIONS',
    'ActionTokenService',
    'create_admin_guard',
    'extract_bearer_token',
]

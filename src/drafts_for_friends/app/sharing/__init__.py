"""Time-limited share links for unpublished drafts."""

from .access import AccessGate, GateContext
from .durations import (
    UNIT_SECONDS,
    describe_remaining,
    duration_to_seconds,
    normalize_unit,
    parse_duration_value,
)
from .errors import GrantAction, GrantError, GrantErrorCode, GrantOutcome
from .grants import GrantManager, SharedDraftView
from .messages import render_outcome
from .model import (
    KEY_PREFIX,
    ShareGrant,
    build_share_url,
    generate_share_secret,
    grant_key,
)
from .public import DocumentQueryPipeline, create_public_router, visible_documents
from .requests import CreateGrantRequest, ExtendGrantRequest, RevokeGrantRequest
from .routes import create_admin_router, read_params

__all__ = [
    'AccessGate',
    'CreateGrantRequest',
    'DocumentQueryPipeline',
    'ExtendGrantRequest',
    'GateContext',
    'GrantAction',
    'GrantError',
    'GrantErrorCode',
    'GrantManager',
    'GrantOutcome',
    'KEY_PREFIX',
    'RevokeGrantRequest',
    'ShareGrant',
    'SharedDraftView',
    'UNIT_SECONDS',
    'build_share_url',
    'create_admin_router',
    'create_public_router',
    'describe_remaining',
    'duration_to_seconds',
    'generate_share_secret',
    'grant_key',
    'normalize_unit',
    'parse_duration_value',
    'read_params',
    'render_outcome',
    'visible_documents',
]

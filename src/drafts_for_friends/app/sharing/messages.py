"""Render grant outcomes as the status line shown on the admin page."""

from __future__ import annotations

from .errors import GrantAction, GrantErrorCode, GrantOutcome

SUCCESS_MESSAGES: dict[GrantAction, str] = {
    GrantAction.CREATE: 'The post is being shared',
    GrantAction.EXTEND: 'The share has been extended',
    GrantAction.REVOKE: 'Post has been unshared',
}

ERROR_MESSAGES: dict[GrantErrorCode, str] = {
    GrantErrorCode.MISSING_PARAMETER: 'Unable to share post, invalid parameters',
    GrantErrorCode.INVALID_TOKEN: (
        'Invalid security token, please refresh the page and try again'
    ),
    GrantErrorCode.DOCUMENT_NOT_FOUND: 'There is no such post!',
    GrantErrorCode.DOCUMENT_ALREADY_PUBLISHED: 'The post is already published!',
    GrantErrorCode.INVALID_DURATION: 'Unable to share post, invalid parameters',
    GrantErrorCode.INVALID_UNIT: 'Unable to share post, the unit is not valid',
    GrantErrorCode.NO_ACTIVE_GRANT: "The post isn't shared, there is nothing to extend",
    GrantErrorCode.NOT_SHARED: "Post isn't shared",
    GrantErrorCode.STORE_DELETE_FAILURE: 'Unknown error occurred',
    GrantErrorCode.STORE_UNAVAILABLE: 'Unable to reach the share store, please try again',
}

# Write failures read differently depending on what was being written.
_STORE_WRITE_MESSAGES: dict[GrantAction, str] = {
    GrantAction.CREATE: "Unable to share post, couldn't persist the share",
    GrantAction.EXTEND: "Unable to extend share, couldn't persist the share",
    GrantAction.REVOKE: 'Unknown error occurred',
}


def render_outcome(outcome: GrantOutcome) -> str:
    if outcome.ok:
        return SUCCESS_MESSAGES[outcome.action]
    if outcome.code is GrantErrorCode.STORE_WRITE_FAILURE:
        return _STORE_WRITE_MESSAGES[outcome.action]
    return ERROR_MESSAGES.get(outcome.code, 'Unknown error occurred')

"""Grant error taxonomy and structured outcomes.

The grant manager never lets an exception cross into the admin surface.
Validation failures are raised internally as ``GrantError`` and converted
to a ``GrantOutcome`` at the manager boundary; ``messages`` renders the
outcome to text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model import ShareGrant


class GrantErrorCode(str, Enum):
    MISSING_PARAMETER = 'missing_parameter'
    INVALID_TOKEN = 'invalid_token'
    DOCUMENT_NOT_FOUND = 'document_not_found'
    DOCUMENT_ALREADY_PUBLISHED = 'document_already_published'
    INVALID_DURATION = 'invalid_duration'
    INVALID_UNIT = 'invalid_unit'
    NO_ACTIVE_GRANT = 'no_active_grant'
    NOT_SHARED = 'not_shared'
    STORE_WRITE_FAILURE = 'store_write_failure'
    STORE_DELETE_FAILURE = 'store_delete_failure'
    STORE_UNAVAILABLE = 'store_unavailable'


class GrantAction(str, Enum):
    CREATE = 'create'
    EXTEND = 'extend'
    REVOKE = 'revoke'


class GrantError(Exception):
    """Raised when a grant operation cannot take effect."""

    def __init__(self, code: GrantErrorCode, detail: str = '') -> None:
        self.code = code
        self.detail = detail
        super().__init__(detail or code.value)


@dataclass(frozen=True, slots=True)
class GrantOutcome:
    """Result of a create/extend/revoke call.

    Attributes:
        action: Which operation produced this outcome.
        code: Error code on failure, None on success.
        grant: The grant as written (create/extend) or removed (revoke).
        detail: Extra context for failures; never contains the secret.
    """

    action: GrantAction
    code: GrantErrorCode | None = None
    grant: ShareGrant | None = None
    detail: str = ''

    @property
    def ok(self) -> bool:
        return self.code is None

    @classmethod
    def success(cls, action: GrantAction, grant: ShareGrant | None = None) -> GrantOutcome:
        return cls(action=action, grant=grant)

    @classmethod
    def failure(cls, action: GrantAction, error: GrantError) -> GrantOutcome:
        return cls(action=action, code=error.code, detail=error.detail)

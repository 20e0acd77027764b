"""Per-action security tokens for admin form submissions.

Every admin mutation (create, extend, revoke) must carry a token issued
for that specific action. Tokens are short-lived HS256 JWTs:

  - ``action`` claim binds the token to one operation.
  - ``exp`` bounds its lifetime (default 24h).
  - ``jti`` makes every issued token distinct.

``verify`` fails closed: any decoding problem, wrong action, or missing
claim yields False.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import jwt

logger = logging.getLogger(__name__)

# ── Constants ─────────────────────────────────────────────────────────

ACTION_CREATE_SHARE = 'dff_create_share'
ACTION_EXTEND_SHARE = 'dff_extend_share'
ACTION_DELETE_SHARE = 'dff_delete_share'

ADMIN_ACTIONS: tuple[str, ...] = (
    ACTION_CREATE_SHARE,
    ACTION_EXTEND_SHARE,
    ACTION_DELETE_SHARE,
)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
TOKEN_ISSUER = 'drafts-for-friends/admin'
_ALGORITHM = 'HS256'


class ActionTokenService:
    """Issue and verify action-scoped admin tokens."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        if not secret:
            raise ValueError('action token secret is required')
        if ttl_seconds <= 0:
            raise ValueError(f'ttl_seconds must be positive, got {ttl_seconds}')
        self._secret = secret
        self._ttl_seconds = ttl_seconds

    def _claims(self, action: str) -> dict[str, Any]:
        now = int(time.time())
        return {
            'iss': TOKEN_ISSUER,
            'action': action,
            'jti': uuid.uuid4().hex,
            'iat': now,
            'exp': now + self._ttl_seconds,
        }

    def issue(self, action: str) -> str:
        return jwt.encode(self._claims(action), self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str, action: str) -> bool:
        if not token or not isinstance(token, str):
            return False
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                issuer=TOKEN_ISSUER,
                options={'require': ['exp', 'iat', 'action']},
            )
        except jwt.ExpiredSignatureError:
            logger.debug('Action token expired (action=%s)', action)
            return False
        except jwt.InvalidTokenError as exc:
            logger.debug('Invalid action token (action=%s): %s', action, exc)
            return False
        return claims.get('action') == action

"""Share-grant domain model.

A grant gives anyone holding its secret read access to one unpublished
draft until ``expires_at``. There is at most one grant per draft: the
store key is derived from the draft id alone, so creating a grant
replaces whatever was there.

Persisted layout (one record per draft)::

    key:   '<prefix><draft_id>'            e.g. 'dff_shared_post_42'
    value: {'secret': str, 'expiry': int}  expiry is a unix timestamp

Security invariant:
  The secret only ever leaves this module inside the share URL. It is
  excluded from ``repr`` and never passed to a logger.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

# ── Constants ─────────────────────────────────────────────────────────

KEY_PREFIX = 'dff_shared_post_'
SECRET_LENGTH = 16
_SECRET_ALPHABET = string.ascii_letters + string.digits


# ── Secrets and keys ─────────────────────────────────────────────────


def generate_share_secret(length: int = SECRET_LENGTH) -> str:
    """Generate a random alphanumeric secret (safe in a query string)."""
    return ''.join(secrets.choice(_SECRET_ALPHABET) for _ in range(length))


def grant_key(draft_id: str | int, prefix: str = KEY_PREFIX) -> str:
    return f'{prefix}{draft_id}'


def build_share_url(site_url: str, draft_id: str | int, secret: str) -> str:
    """Build ``<site>/?p=<draft_id>&secret=<secret>``."""
    return f'{site_url.rstrip("/")}/?p={draft_id}&secret={secret}'


# ── Domain model ──────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ShareGrant:
    """One active share of a draft.

    Attributes:
        draft_id: Identifier of the shared document.
        secret: Random token that must appear in the share URL.
        expires_at: Absolute unix timestamp after which the grant is void.
    """

    draft_id: str
    secret: str = field(repr=False)
    expires_at: int

    def to_record(self) -> dict[str, Any]:
        return {'secret': self.secret, 'expiry': self.expires_at}

    @classmethod
    def from_record(cls, draft_id: str | int, record: Any) -> ShareGrant | None:
        """Rebuild a grant from a stored record, or None if it is malformed."""
        if not isinstance(record, Mapping):
            return None
        secret = record.get('secret')
        expiry = record.get('expiry')
        if not isinstance(secret, str) or not secret:
            return None
        if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
            return None
        return cls(draft_id=str(draft_id), secret=secret, expires_at=int(expiry))

    def extended_by(self, seconds: int) -> ShareGrant:
        """Same secret, expiry pushed back by ``seconds``."""
        return ShareGrant(
            draft_id=self.draft_id,
            secret=self.secret,
            expires_at=self.expires_at + seconds,
        )

    def remaining_seconds(self, now: float) -> int:
        return max(0, int(self.expires_at - now))

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def share_url(self, site_url: str) -> str:
        return build_share_url(site_url, self.draft_id, self.secret)

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)

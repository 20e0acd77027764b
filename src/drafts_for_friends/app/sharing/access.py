"""Access gate: decide whether an anonymous request may see a draft.

The surrounding document query pipeline runs a visibility filter that
removes every non-published document before the result set is final.
The gate takes part in that pipeline in two steps:

  1. ``filter_query_results`` sees the raw query result. If it is a single
     non-published document and the request carries that draft's secret,
     the document is remembered in the request's ``GateContext``.
  2. ``finalize_results`` sees the result after visibility filtering. If
     it came back empty and a document is pending, that document becomes
     the whole result; otherwise the pending state is dropped and the
     upstream result passes through unchanged.

Pending state lives on a ``GateContext`` created per request and passed
through the pipeline; the gate itself holds no request state and can be
shared across concurrent requests.

A grant is valid while the store still returns it and its stored expiry
is in the future. Secrets are compared in constant time.
"""

from __future__ import annotations

import hmac
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ..observability import get_logger
from ..protocols import Document, DocumentStatus, ExpiringStore, StoreUnavailable
from .model import KEY_PREFIX, ShareGrant, grant_key

logger = get_logger(__name__)


@dataclass(slots=True)
class GateContext:
    """Request-scoped pending authorization (``Empty`` or ``Pending(doc)``)."""

    pending: Document | None = None

    @property
    def is_pending(self) -> bool:
        return self.pending is not None

    def clear(self) -> None:
        self.pending = None


class AccessGate:
    """Read-path check for share secrets."""

    def __init__(
        self,
        store: ExpiringStore,
        *,
        key_prefix: str = KEY_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._key_prefix = key_prefix
        self._clock = clock

    async def authorize(
        self,
        draft_id: Any,
        candidate_secret: Any,
        status: str | None,
    ) -> bool:
        """True iff the draft is unpublished and ``candidate_secret`` matches its live grant."""
        if status == DocumentStatus.PUBLISHED:
            return False
        if draft_id is None or str(draft_id) == '':
            return False
        if not isinstance(candidate_secret, str) or not candidate_secret:
            return False

        # Ids are compared exactly as given.
        draft_id = str(draft_id)
        try:
            record = await self._store.get(grant_key(draft_id, self._key_prefix))
        except StoreUnavailable:
            logger.warning('grant_lookup_failed', draft_id=draft_id)
            return False

        grant = ShareGrant.from_record(draft_id, record)
        if grant is None or grant.is_expired(self._clock()):
            return False

        return hmac.compare_digest(
            grant.secret.encode('utf-8'),
            candidate_secret.encode('utf-8'),
        )

    async def filter_query_results(
        self,
        ctx: GateContext,
        documents: Sequence[Document],
        candidate_secret: str | None,
    ) -> list[Document]:
        """Remember a single authorized draft; always return ``documents`` unchanged."""
        if len(documents) != 1:
            return list(documents)

        doc = documents[0]
        if not doc.is_published and await self.authorize(doc.id, candidate_secret, doc.status):
            ctx.pending = doc
            logger.debug('shared_draft_authorized', draft_id=doc.id)
        return list(documents)

    def finalize_results(
        self,
        ctx: GateContext,
        documents: Sequence[Document],
    ) -> list[Document]:
        """Re-inject the pending draft if the visibility stage dropped it."""
        pending = ctx.pending
        ctx.clear()
        if not documents and pending is not None:
            return [pending]
        return list(documents)

"""Grant manager: create, extend and revoke draft shares.

Each public operation takes a typed request, validates its action token,
and either writes/deletes exactly one store record or leaves the store
untouched. Failures never partially apply.

Expiry bookkeeping:
  The stored ``expiry`` timestamp is the source of truth. Every write
  passes ``ttl = expiry - now`` to the store, so extending a grant by
  ``d`` seconds moves both the logical expiry and the store's own TTL to
  ``T + d``. The access gate checks both.

Upward interface:
  ``process_create`` / ``process_extend`` / ``process_delete`` take the raw
  form parameter bag and return the status line for the admin page. They
  never raise.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from ..observability import get_logger
from ..protocols import (
    ActionTokenValidator,
    Document,
    DocumentStatus,
    DocumentStore,
    ExpiringStore,
    StoreUnavailable,
)
from ..security.action_tokens import (
    ACTION_CREATE_SHARE,
    ACTION_DELETE_SHARE,
    ACTION_EXTEND_SHARE,
)
from .durations import describe_remaining, duration_to_seconds
from .errors import GrantAction, GrantError, GrantErrorCode, GrantOutcome
from .messages import render_outcome
from .model import KEY_PREFIX, ShareGrant, generate_share_secret, grant_key
from .requests import CreateGrantRequest, ExtendGrantRequest, RevokeGrantRequest

logger = get_logger(__name__)

NOT_SHARED_LABEL = 'Not Shared'


@dataclass(frozen=True, slots=True)
class SharedDraftView:
    """One row of the admin listing."""

    document: Document
    share_url: str | None
    expires_after: str

    @property
    def is_shared(self) -> bool:
        return self.share_url is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.document.id,
            'title': self.document.title,
            'status': self.document.status,
            'shared': self.is_shared,
            'share_url': self.share_url,
            'expires_after': self.expires_after,
        }


class GrantManager:
    """Owns every state transition of a share grant."""

    def __init__(
        self,
        store: ExpiringStore,
        documents: DocumentStore,
        tokens: ActionTokenValidator,
        *,
        site_url: str = '',
        key_prefix: str = KEY_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._documents = documents
        self._tokens = tokens
        self._site_url = site_url
        self._key_prefix = key_prefix
        self._clock = clock

    # ── Read path ────────────────────────────────────────────────────

    async def get_grant(self, draft_id: str) -> ShareGrant | None:
        record = await self._store.get(grant_key(draft_id, self._key_prefix))
        if record is None:
            return None
        return ShareGrant.from_record(draft_id, record)

    async def list_shared_drafts(self) -> list[SharedDraftView]:
        """Every shareable document, by title, with its current share state."""
        now = self._clock()
        rows = []
        for doc in await self._documents.list_by_status(DocumentStatus.SHAREABLE):
            grant = await self.get_grant(doc.id)
            if grant is None:
                rows.append(SharedDraftView(doc, None, NOT_SHARED_LABEL))
            else:
                rows.append(SharedDraftView(
                    doc,
                    grant.share_url(self._site_url),
                    describe_remaining(grant.expires_at, now),
                ))
        return rows

    # ── Operations ───────────────────────────────────────────────────

    async def create(self, request: CreateGrantRequest) -> GrantOutcome:
        try:
            self._check_token(request.token, ACTION_CREATE_SHARE)
            doc = await self._shareable_document(request.draft_id)
            seconds = duration_to_seconds(request.duration_value, request.duration_unit)
            now = self._clock()
            grant = ShareGrant(
                draft_id=doc.id,
                secret=generate_share_secret(),
                expires_at=int(now) + seconds,
            )
            await self._write(grant, now)
        except GrantError as exc:
            return self._rejected(GrantAction.CREATE, request.draft_id, exc)

        logger.info(
            'grant_created',
            draft_id=grant.draft_id,
            expires_at=grant.expires_at,
            ttl_seconds=seconds,
        )
        return GrantOutcome.success(GrantAction.CREATE, grant)

    async def extend(self, request: ExtendGrantRequest) -> GrantOutcome:
        try:
            self._check_token(request.token, ACTION_EXTEND_SHARE)
            await self._shareable_document(request.draft_id)
            seconds = duration_to_seconds(request.duration_value, request.duration_unit)
            current = await self._current_grant(request.draft_id)
            now = self._clock()
            if current is None or current.is_expired(now):
                raise GrantError(GrantErrorCode.NO_ACTIVE_GRANT)
            grant = current.extended_by(seconds)
            await self._write(grant, now)
        except GrantError as exc:
            return self._rejected(GrantAction.EXTEND, request.draft_id, exc)

        logger.info(
            'grant_extended',
            draft_id=grant.draft_id,
            previous_expires_at=current.expires_at,
            expires_at=grant.expires_at,
        )
        return GrantOutcome.success(GrantAction.EXTEND, grant)

    async def revoke(self, request: RevokeGrantRequest) -> GrantOutcome:
        try:
            self._check_token(request.token, ACTION_DELETE_SHARE)
            record = await self._stored_record(request.draft_id)
            if record is None:
                raise GrantError(GrantErrorCode.NOT_SHARED)
            # A malformed record is still deleted; it just has no grant to report.
            current = ShareGrant.from_record(request.draft_id, record)
            await self._delete(request.draft_id)
        except GrantError as exc:
            return self._rejected(GrantAction.REVOKE, request.draft_id, exc)

        logger.info('grant_revoked', draft_id=request.draft_id)
        return GrantOutcome.success(GrantAction.REVOKE, current)

    # ── Parameter-bag adapters ───────────────────────────────────────

    async def process_create(self, params: Mapping[str, Any]) -> str:
        return render_outcome(await self.handle_create(params))

    async def process_extend(self, params: Mapping[str, Any]) -> str:
        return render_outcome(await self.handle_extend(params))

    async def process_delete(self, params: Mapping[str, Any]) -> str:
        return render_outcome(await self.handle_delete(params))

    async def handle_create(self, params: Mapping[str, Any]) -> GrantOutcome:
        try:
            request = CreateGrantRequest.from_params(params)
        except (GrantError, ValidationError) as exc:
            return self._rejected(GrantAction.CREATE, params.get('post_id'), _as_grant_error(exc))
        return await self.create(request)

    async def handle_extend(self, params: Mapping[str, Any]) -> GrantOutcome:
        try:
            request = ExtendGrantRequest.from_params(params)
        except (GrantError, ValidationError) as exc:
            return self._rejected(GrantAction.EXTEND, params.get('post_id'), _as_grant_error(exc))
        return await self.extend(request)

    async def handle_delete(self, params: Mapping[str, Any]) -> GrantOutcome:
        try:
            request = RevokeGrantRequest.from_params(params)
        except (GrantError, ValidationError) as exc:
            return self._rejected(GrantAction.REVOKE, params.get('post_id'), _as_grant_error(exc))
        return await self.revoke(request)

    # ── Helpers ──────────────────────────────────────────────────────

    def _check_token(self, token: str, action: str) -> None:
        if not self._tokens.verify(token, action):
            raise GrantError(GrantErrorCode.INVALID_TOKEN)

    async def _shareable_document(self, draft_id: str) -> Document:
        try:
            doc = await self._documents.get_by_id(draft_id)
        except StoreUnavailable as exc:
            raise GrantError(GrantErrorCode.STORE_UNAVAILABLE, str(exc)) from exc
        if doc is None:
            raise GrantError(GrantErrorCode.DOCUMENT_NOT_FOUND)
        if doc.is_published:
            raise GrantError(GrantErrorCode.DOCUMENT_ALREADY_PUBLISHED)
        return doc

    async def _stored_record(self, draft_id: str) -> Any:
        try:
            return await self._store.get(grant_key(draft_id, self._key_prefix))
        except StoreUnavailable as exc:
            raise GrantError(GrantErrorCode.STORE_UNAVAILABLE, str(exc)) from exc

    async def _current_grant(self, draft_id: str) -> ShareGrant | None:
        record = await self._stored_record(draft_id)
        if record is None:
            return None
        return ShareGrant.from_record(draft_id, record)

    async def _write(self, grant: ShareGrant, now: float) -> None:
        ttl = grant.expires_at - int(now)
        try:
            written = await self._store.set(
                grant_key(grant.draft_id, self._key_prefix),
                grant.to_record(),
                ttl,
            )
        except StoreUnavailable as exc:
            raise GrantError(GrantErrorCode.STORE_WRITE_FAILURE, str(exc)) from exc
        if not written:
            raise GrantError(GrantErrorCode.STORE_WRITE_FAILURE)

    async def _delete(self, draft_id: str) -> None:
        try:
            deleted = await self._store.delete(grant_key(draft_id, self._key_prefix))
        except StoreUnavailable as exc:
            raise GrantError(GrantErrorCode.STORE_DELETE_FAILURE, str(exc)) from exc
        if not deleted:
            raise GrantError(GrantErrorCode.STORE_DELETE_FAILURE)

    def _rejected(
        self, action: GrantAction, draft_id: Any, error: GrantError,
    ) -> GrantOutcome:
        logger.info(
            'grant_rejected',
            action=action.value,
            draft_id=draft_id,
            code=error.code.value,
        )
        return GrantOutcome.failure(action, error)


def _as_grant_error(exc: GrantError | ValidationError) -> GrantError:
    if isinstance(exc, GrantError):
        return exc
    return GrantError(GrantErrorCode.MISSING_PARAMETER, 'malformed parameters')

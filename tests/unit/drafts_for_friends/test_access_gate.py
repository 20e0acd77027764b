"""Tests for the read-path access gate and the document query pipeline.

Validates:
  - authorize() is true only for an unpublished draft with a live grant
    and the exact secret.
  - Expired, revoked, unknown and malformed grants are all denied.
  - The filter/finalize pair re-injects exactly one authorized draft and
    otherwise passes results through unchanged.
  - Pending state is per request and always cleared by finalize.
"""

from __future__ import annotations

import pytest

from drafts_for_friends.app.protocols import Document, StoreUnavailable
from drafts_for_friends.app.sharing.access import AccessGate, GateContext
from drafts_for_friends.app.sharing.public import DocumentQueryPipeline, visible_documents

DRAFT = Document(id='42', title='Upcoming launch', status='draft', content='secret plans')
OTHER_DRAFT = Document(id='9', title='Awaiting review', status='pending')
PUBLISHED = Document(id='7', title='Hello world', status='published')

SECRET = 'AbCdEfGh12345678'


async def _share(store, clock, draft_id='42', secret=SECRET, seconds=3600):
    expiry = int(clock()) + seconds
    await store.set(f'dff_shared_post_{draft_id}', {'secret': secret, 'expiry': expiry}, seconds)
    return expiry


class _DownStore:
    async def get(self, key):
        raise StoreUnavailable('connection refused')

    async def set(self, key, value, ttl_seconds):
        raise StoreUnavailable('connection refused')

    async def delete(self, key):
        raise StoreUnavailable('connection refused')


class _StaleStore:
    """Store that still returns a record past its logical expiry."""

    def __init__(self, record):
        self.record = record

    async def get(self, key):
        return self.record

    async def set(self, key, value, ttl_seconds):
        return True

    async def delete(self, key):
        return True


# =====================================================================
# authorize
# =====================================================================


class TestAuthorize:

    @pytest.mark.asyncio
    async def test_matching_secret(self, gate, store, clock):
        await _share(store, clock)
        assert await gate.authorize('42', SECRET, 'draft') is True

    @pytest.mark.asyncio
    async def test_integer_id_accepted(self, gate, store, clock):
        await _share(store, clock)
        assert await gate.authorize(42, SECRET, 'draft') is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize('candidate', ['abcdefgh12345678', SECRET[:-1], SECRET + 'x', ''])
    async def test_wrong_secret(self, gate, store, clock, candidate):
        await _share(store, clock)
        assert await gate.authorize('42', candidate, 'draft') is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize('candidate', [None, 1234, b'AbCdEfGh12345678'])
    async def test_non_string_secret(self, gate, store, clock, candidate):
        await _share(store, clock)
        assert await gate.authorize('42', candidate, 'draft') is False

    @pytest.mark.asyncio
    async def test_published_status_denied(self, gate, store, clock):
        await _share(store, clock)
        assert await gate.authorize('42', SECRET, 'published') is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize('draft_id', [None, '', '   '])
    async def test_missing_id(self, gate, draft_id):
        assert await gate.authorize(draft_id, SECRET, 'draft') is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize('draft_id', [' 42 ', '42 ', '042'])
    async def test_id_compared_as_given(self, gate, store, clock, draft_id):
        await _share(store, clock)
        assert await gate.authorize(draft_id, SECRET, 'draft') is False

    @pytest.mark.asyncio
    async def test_no_grant(self, gate):
        assert await gate.authorize('42', SECRET, 'draft') is False

    @pytest.mark.asyncio
    async def test_secret_of_other_draft(self, gate, store, clock):
        await _share(store, clock, draft_id='9')
        assert await gate.authorize('42', SECRET, 'draft') is False

    @pytest.mark.asyncio
    async def test_expired_by_store_ttl(self, gate, store, clock):
        await _share(store, clock, seconds=60)
        clock.advance(60)
        assert await gate.authorize('42', SECRET, 'draft') is False

    @pytest.mark.asyncio
    async def test_expired_by_stored_expiry(self, clock):
        stale = _StaleStore({'secret': SECRET, 'expiry': int(clock()) - 1})
        gate = AccessGate(stale, clock=clock)
        assert await gate.authorize('42', SECRET, 'draft') is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize('record', [
        'AbCdEfGh12345678',
        {'secret': SECRET},
        {'expiry': 1_800_000_000},
        {'secret': '', 'expiry': 1_800_000_000},
        {'secret': SECRET, 'expiry': 'tomorrow'},
    ])
    async def test_malformed_record(self, clock, record):
        gate = AccessGate(_StaleStore(record), clock=clock)
        assert await gate.authorize('42', SECRET, 'draft') is False

    @pytest.mark.asyncio
    async def test_store_unavailable_denies(self, clock):
        gate = AccessGate(_DownStore(), clock=clock)
        assert await gate.authorize('42', SECRET, 'draft') is False

    @pytest.mark.asyncio
    async def test_custom_key_prefix(self, store, clock):
        await store.set('blog_share_42', {'secret': SECRET, 'expiry': int(clock()) + 60}, 60)
        gate = AccessGate(store, key_prefix='blog_share_', clock=clock)
        assert await gate.authorize('42', SECRET, 'draft') is True


# =====================================================================
# filter / finalize
# =====================================================================


class TestFilterAndFinalize:

    @pytest.mark.asyncio
    async def test_authorized_draft_reinjected(self, gate, store, clock):
        await _share(store, clock)
        ctx = GateContext()

        filtered = await gate.filter_query_results(ctx, [DRAFT], SECRET)
        assert filtered == [DRAFT]
        assert ctx.pending == DRAFT

        assert gate.finalize_results(ctx, []) == [DRAFT]
        assert ctx.is_pending is False

    @pytest.mark.asyncio
    async def test_wrong_secret_not_pending(self, gate, store, clock):
        await _share(store, clock)
        ctx = GateContext()
        await gate.filter_query_results(ctx, [DRAFT], 'nope')
        assert ctx.is_pending is False
        assert gate.finalize_results(ctx, []) == []

    @pytest.mark.asyncio
    async def test_multiple_results_ignored(self, gate, store, clock):
        await _share(store, clock)
        ctx = GateContext()
        filtered = await gate.filter_query_results(ctx, [DRAFT, OTHER_DRAFT], SECRET)
        assert filtered == [DRAFT, OTHER_DRAFT]
        assert ctx.is_pending is False

    @pytest.mark.asyncio
    async def test_empty_results_ignored(self, gate):
        ctx = GateContext()
        assert await gate.filter_query_results(ctx, [], SECRET) == []
        assert ctx.is_pending is False

    @pytest.mark.asyncio
    async def test_published_document_never_pending(self, gate, store, clock):
        await _share(store, clock, draft_id='7')
        ctx = GateContext()
        await gate.filter_query_results(ctx, [PUBLISHED], SECRET)
        assert ctx.is_pending is False

    @pytest.mark.asyncio
    async def test_nonempty_upstream_wins_and_clears(self, gate, store, clock):
        await _share(store, clock)
        ctx = GateContext()
        await gate.filter_query_results(ctx, [DRAFT], SECRET)

        assert gate.finalize_results(ctx, [PUBLISHED]) == [PUBLISHED]
        assert ctx.is_pending is False
        assert gate.finalize_results(ctx, []) == []

    def test_finalize_without_pending_passes_through(self, gate):
        ctx = GateContext()
        assert gate.finalize_results(ctx, []) == []
        assert gate.finalize_results(ctx, [PUBLISHED]) == [PUBLISHED]

    @pytest.mark.asyncio
    async def test_contexts_are_independent(self, gate, store, clock):
        await _share(store, clock)
        authorized, anonymous = GateContext(), GateContext()

        await gate.filter_query_results(authorized, [DRAFT], SECRET)
        await gate.filter_query_results(anonymous, [DRAFT], None)

        assert gate.finalize_results(anonymous, []) == []
        assert gate.finalize_results(authorized, []) == [DRAFT]


# =====================================================================
# Query pipeline
# =====================================================================


class TestDocumentQueryPipeline:

    def test_visibility_keeps_published_only(self):
        assert visible_documents([DRAFT, PUBLISHED, OTHER_DRAFT]) == [PUBLISHED]

    @pytest.mark.asyncio
    async def test_published_visible_without_secret(self, documents, gate):
        pipeline = DocumentQueryPipeline(documents, gate)
        assert [d.id for d in await pipeline.run('7')] == ['7']

    @pytest.mark.asyncio
    async def test_draft_hidden_without_secret(self, documents, gate, store, clock):
        await _share(store, clock)
        pipeline = DocumentQueryPipeline(documents, gate)
        assert await pipeline.run('42') == []

    @pytest.mark.asyncio
    async def test_draft_visible_with_secret(self, documents, gate, store, clock):
        await _share(store, clock)
        pipeline = DocumentQueryPipeline(documents, gate)
        results = await pipeline.run('42', SECRET)
        assert [d.content for d in results] == ['secret plans']

    @pytest.mark.asyncio
    async def test_draft_hidden_after_expiry(self, documents, gate, store, clock):
        await _share(store, clock, seconds=120)
        pipeline = DocumentQueryPipeline(documents, gate)
        clock.advance(121)
        assert await pipeline.run('42', SECRET) == []

    @pytest.mark.asyncio
    async def test_unknown_document(self, documents, gate):
        pipeline = DocumentQueryPipeline(documents, gate)
        assert await pipeline.run('999', SECRET) == []

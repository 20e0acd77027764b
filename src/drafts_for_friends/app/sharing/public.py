"""Anonymous read path for shared drafts.

  GET /?p=<draft_id>&secret=<secret>   → the document, or 404

The query pipeline mirrors how a site resolves ``?p=<id>``:

  lookup by id → gate filter → visibility filter → gate finalize

The visibility filter only lets published documents through, so a
draft reaches the caller only when the gate re-injects it. Every denial
(unknown id, wrong secret, expired or revoked grant) is the same 404.
"""

from __future__ import annotations

from typing import Sequence

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from ..protocols import Document, DocumentStore, StoreUnavailable
from .access import AccessGate, GateContext


def visible_documents(documents: Sequence[Document]) -> list[Document]:
    """The site's own visibility rule: anonymous readers see published documents only."""
    return [doc for doc in documents if doc.is_published]


class DocumentQueryPipeline:
    """Single-document query with the access gate wired in."""

    def __init__(self, documents: DocumentStore, gate: AccessGate) -> None:
        self._documents = documents
        self._gate = gate

    async def run(self, document_id: str, secret: str | None = None) -> list[Document]:
        ctx = GateContext()
        doc = await self._documents.get_by_id(document_id)
        results = [doc] if doc is not None else []
        results = await self._gate.filter_query_results(ctx, results, secret)
        results = visible_documents(results)
        return self._gate.finalize_results(ctx, results)


def create_public_router(pipeline: DocumentQueryPipeline) -> APIRouter:
    """Create the anonymous document read router."""
    router = APIRouter(tags=['public'])

    @router.get('/')
    async def read_document(
        p: str | None = Query(default=None, description='Document id'),
        secret: str | None = Query(default=None, description='Share secret'),
    ):
        if not p:
            return JSONResponse(
                status_code=404,
                content={'error': 'not_found', 'detail': 'Document not found.'},
            )

        try:
            results = await pipeline.run(p, secret)
        except StoreUnavailable:
            return JSONResponse(
                status_code=503,
                content={'error': 'unavailable', 'detail': 'Document store unavailable.'},
            )
        if not results:
            return JSONResponse(
                status_code=404,
                content={'error': 'not_found', 'detail': 'Document not found.'},
            )

        doc = results[0]
        return {'document': doc.to_dict(), 'shared': not doc.is_published}

    return router

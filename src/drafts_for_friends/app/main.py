"""FastAPI application factory.

The create_app() factory is the single entry point for building the ASGI
application. It wires middleware (request-ID, CORS), the admin and public
routers, and injects collaborator implementations.

Usage:
    # Local development (in-memory stores)
    from drafts_for_friends.app import create_app, DraftShareSettings
    app = create_app(DraftShareSettings())

    # Hosted (Supabase stores built from settings)
    app = create_app(DraftShareSettings.from_env())

    # Testing (full DI control)
    app = create_app(settings, expiring_store=store, document_store=docs, clock=clock)
"""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .observability import configure_logging, get_logger, request_id_ctx
from .protocols import ActionTokenValidator, DocumentStore, ExpiringStore
from .security.action_tokens import ActionTokenService
from .security.admin_guard import create_admin_guard
from .settings import DraftShareSettings
from .sharing.access import AccessGate
from .sharing.grants import GrantManager
from .sharing.public import DocumentQueryPipeline, create_public_router
from .sharing.routes import create_admin_router

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppDependencies:
    """Container for the injected collaborators and the share core built on them.

    Stored on ``app.state.deps`` so tests and route handlers can reach them.
    """

    document_store: DocumentStore
    expiring_store: ExpiringStore
    action_tokens: ActionTokenValidator
    grant_manager: GrantManager
    access_gate: AccessGate


def _build_stores(
    settings: DraftShareSettings,
    clock: Callable[[], float],
) -> tuple[DocumentStore, ExpiringStore]:
    """Default stores: Supabase when configured, otherwise in-memory (local only)."""
    if settings.uses_supabase:
        from .db import SupabaseClient, SupabaseDocumentStore, SupabaseExpiringStore

        client = SupabaseClient(
            supabase_url=settings.supabase_url,
            service_role_key=settings.supabase_service_role_key,
        )
        return SupabaseDocumentStore(client), SupabaseExpiringStore(client, clock=clock)

    from .inmemory import InMemoryDocumentStore, InMemoryExpiringStore

    return InMemoryDocumentStore(), InMemoryExpiringStore(clock=clock)


# ── Middleware ──────────────────────────────────────────────────────


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Generate or propagate X-Request-ID and bind it to the log context."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_ctx.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


# ── Factory ─────────────────────────────────────────────────────────


def create_app(
    settings: DraftShareSettings | None = None,
    *,
    document_store: DocumentStore | None = None,
    expiring_store: ExpiringStore | None = None,
    action_tokens: ActionTokenValidator | None = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Create the drafts-for-friends application.

    Args:
        settings: Configuration; defaults to local development settings.
        document_store: Document lookup collaborator.
        expiring_store: Expiring key-value store holding share grants.
        action_tokens: Per-action token issuer/validator for admin forms.
        clock: Time source (unix seconds) shared by the store and the core.

    Raises:
        ValueError: If settings validation fails, or a non-local environment
            has neither injected stores nor Supabase configuration.
    """
    if settings is None:
        settings = DraftShareSettings()

    errors = settings.validate()
    if errors:
        raise ValueError(
            "Settings validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )

    missing = document_store is None or expiring_store is None
    if missing and not settings.is_local and not settings.uses_supabase:
        raise ValueError(
            f"Non-local environment ({settings.environment}) requires Supabase "
            "configuration or explicitly provided document/expiring stores"
        )
    if missing:
        default_docs, default_store = _build_stores(settings, clock)
        if document_store is None:
            document_store = default_docs
        if expiring_store is None:
            expiring_store = default_store

    if action_tokens is None:
        action_tokens = ActionTokenService(
            settings.action_token_secret,
            ttl_seconds=settings.action_token_ttl_seconds,
        )

    manager = GrantManager(
        expiring_store,
        document_store,
        action_tokens,
        site_url=settings.site_url,
        key_prefix=settings.share_key_prefix,
        clock=clock,
    )
    gate = AccessGate(expiring_store, key_prefix=settings.share_key_prefix, clock=clock)
    deps = AppDependencies(
        document_store=document_store,
        expiring_store=expiring_store,
        action_tokens=action_tokens,
        grant_manager=manager,
        access_gate=gate,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(environment=settings.environment)
        logger.info("drafts_for_friends_startup", environment=settings.environment)
        yield
        logger.info("drafts_for_friends_shutdown")

    app = FastAPI(
        title="Drafts for Friends",
        description="Time-limited share links for unpublished drafts",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.deps = deps
    app.state.settings = settings

    # ── Middleware stack (applied in reverse order) ──────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    # ── Routes ──────────────────────────────────────────────────

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    admin_guard = create_admin_guard(
        settings.admin_api_key,
        allow_anonymous=settings.is_local,
    )
    app.include_router(create_admin_router(manager, action_tokens, admin_guard))
    app.include_router(create_public_router(DocumentQueryPipeline(document_store, gate)))

    return app


def create_app_from_env() -> FastAPI:
    """Build the app from environment variables (see DraftShareSettings.from_env)."""
    return create_app(DraftShareSettings.from_env())


# For uvicorn, use --factory flag:
#   uvicorn drafts_for_friends.app.main:create_app_from_env --factory

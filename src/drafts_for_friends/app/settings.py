"""Service configuration settings.

DraftShareSettings is the single configuration object accepted by
create_app(). It is a plain frozen dataclass (not env-coupled) so tests can
inject config without touching os.environ; ``from_env`` builds one from
environment variables for real deployments.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .security.action_tokens import DEFAULT_TTL_SECONDS
from .sharing.model import KEY_PREFIX

VALID_ENVIRONMENTS = frozenset({"local", "staging", "production"})


@dataclass(frozen=True, slots=True)
class DraftShareSettings:
    """Configuration for the drafts-for-friends FastAPI application.

    All fields have sensible defaults for local development. Non-local
    environments must supply real values for site_url, action_token_secret
    and admin_api_key.
    """

    # ── Environment ────────────────────────────────────────────────
    environment: str = "local"
    """One of: local, staging, production."""

    site_url: str = "http://localhost:8000"
    """Public base URL used to build share links (no trailing slash)."""

    # ── Admin / tokens ─────────────────────────────────────────────
    admin_api_key: str = ""
    """Bearer key for the admin endpoints. Empty only allowed in local."""

    action_token_secret: str = "local-dev-action-token-secret-change-me"
    """HMAC secret for per-action form tokens. >=32 chars outside local."""

    action_token_ttl_seconds: int = DEFAULT_TTL_SECONDS

    # ── Share storage ──────────────────────────────────────────────
    share_key_prefix: str = KEY_PREFIX

    supabase_url: str = ""
    supabase_service_role_key: str = ""
    """Service-role key for PostgREST calls. Never log this."""

    # ── CORS ───────────────────────────────────────────────────────
    cors_origins: tuple[str, ...] = (
        "http://localhost:5173",
        "http://localhost:3000",
    )

    @property
    def is_local(self) -> bool:
        return self.environment == "local"

    @property
    def uses_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    def validate(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        if self.environment not in VALID_ENVIRONMENTS:
            errors.append(
                f"environment must be one of {sorted(VALID_ENVIRONMENTS)}, "
                f"got {self.environment!r}"
            )
        if not self.site_url.startswith(("http://", "https://")):
            errors.append(f"site_url must be an http(s) URL, got {self.site_url!r}")
        if self.action_token_ttl_seconds <= 0:
            errors.append("action_token_ttl_seconds must be positive")
        if not self.share_key_prefix:
            errors.append("share_key_prefix must not be empty")
        if not self.is_local:
            if not self.site_url.startswith("https://"):
                errors.append(f"{self.environment}: site_url must use https")
            if not self.admin_api_key:
                errors.append(f"{self.environment}: admin_api_key is required")
            if len(self.action_token_secret) < 32:
                errors.append(
                    f"{self.environment}: action_token_secret must be >= 32 characters"
                )
        return errors

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> DraftShareSettings:
        """Build settings from environment variables.

        Tests should construct DraftShareSettings directly.
        """
        if env is None:
            env = dict(os.environ)

        defaults = cls()
        cors_raw = env.get("CORS_ORIGINS", "")
        cors = (
            tuple(o.strip() for o in cors_raw.split(",") if o.strip())
            if cors_raw
            else defaults.cors_origins
        )

        ttl_raw = env.get("ACTION_TOKEN_TTL_SECONDS", "").strip()
        try:
            ttl = int(ttl_raw) if ttl_raw else DEFAULT_TTL_SECONDS
        except ValueError:
            raise ValueError(
                f"ACTION_TOKEN_TTL_SECONDS must be an integer, got {ttl_raw!r}"
            ) from None

        return cls(
            environment=env.get("ENVIRONMENT", "local"),
            site_url=env.get("SITE_URL", defaults.site_url).strip().rstrip("/"),
            admin_api_key=env.get("ADMIN_API_KEY", ""),
            action_token_secret=env.get("ACTION_TOKEN_SECRET", defaults.action_token_secret),
            action_token_ttl_seconds=ttl,
            share_key_prefix=env.get("SHARE_KEY_PREFIX", KEY_PREFIX),
            supabase_url=env.get("SUPABASE_URL", ""),
            supabase_service_role_key=env.get("SUPABASE_SERVICE_ROLE_KEY", ""),
            cors_origins=cors,
        )

"""Structured logging for the share service.

One structlog pipeline serves both structlog loggers (the share core) and
plain stdlib loggers (the store backends, token verification): stdlib
records are run through the same pre-chain, so every line carries the
request id, level, logger name and an ISO timestamp.

Usage::

    from drafts_for_friends.app.observability import configure_logging, get_logger

    configure_logging(environment="production")  # once, at startup
    logger = get_logger(__name__)
    logger.info("grant_created", draft_id="42", ttl_seconds=7200)

Share secrets, action tokens and share URLs are scrubbed by
``redact_sensitive`` before rendering. Callers still log the draft id, not
the secret.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar

import structlog

# Request-scoped correlation id, set by RequestIDMiddleware.
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Event keys whose values never reach a log sink.
SENSITIVE_KEYS: frozenset[str] = frozenset({"secret", "token", "_nonce", "share_url"})
_REDACTED = "<redacted>"

_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore")

_configured = False


def _add_request_id(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    rid = request_id_ctx.get()
    if rid is not None:
        event_dict["request_id"] = rid
    return event_dict


def redact_sensitive(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    """Replace share secrets and action tokens with a placeholder."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = _REDACTED
    return event_dict


def build_pre_chain() -> list:
    """Processors applied to every event, structlog- or stdlib-originated."""
    return [
        structlog.contextvars.merge_contextvars,
        _add_request_id,
        redact_sensitive,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _resolve_json_output(json_output: bool | None, environment: str | None) -> bool:
    if json_output is not None:
        return json_output
    fmt = os.environ.get("LOG_FORMAT")
    if fmt:
        return fmt == "json"
    # Console output only for local development.
    return (environment or "local") != "local"


def configure_logging(
    *,
    level: str | None = None,
    json_output: bool | None = None,
    environment: str | None = None,
    force: bool = False,
) -> None:
    """Install the structlog pipeline and the root stdlib handler.

    Args:
        level: Log level name. Defaults to LOG_LEVEL env var or INFO.
        json_output: JSON lines when True, console rendering when False.
            Defaults to LOG_FORMAT, else JSON everywhere but local.
        environment: Deployment environment, used for the format default.
        force: Reconfigure even if logging was already configured.
    """
    global _configured
    if _configured and not force:
        return
    _configured = True

    level = level or os.environ.get("LOG_LEVEL", "INFO")
    pre_chain = build_pre_chain()

    if _resolve_json_output(json_output, environment):
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)

"""Logging setup shared by the admin and public surfaces."""

from .logging import configure_logging, get_logger, request_id_ctx

__all__ = ["configure_logging", "get_logger", "request_id_ctx"]

"""Drafts for Friends FastAPI application."""

from .main import create_app
from .settings import DraftShareSettings

__all__ = ["create_app", "DraftShareSettings"]

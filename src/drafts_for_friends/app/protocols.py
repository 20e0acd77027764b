"""Collaborator protocols for dependency injection.

The share core only specifies how it uses these collaborators. Concrete
implementations live in ``inmemory`` (local dev, tests) and ``db``
(Supabase/PostgREST for hosted environments). The app factory accepts
anything matching these protocols.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence, runtime_checkable


class DocumentStatus:
    """Document statuses understood by the share core."""

    DRAFT = "draft"
    PENDING = "pending"
    FUTURE = "future"
    PUBLISHED = "published"

    SHAREABLE: tuple[str, ...] = (DRAFT, PENDING, FUTURE)


@dataclass(frozen=True, slots=True)
class Document:
    id: str
    title: str
    status: str
    content: str = ""

    @property
    def is_published(self) -> bool:
        return self.status == DocumentStatus.PUBLISHED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "content": self.content,
        }


@runtime_checkable
class DocumentStore(Protocol):
    """Read access to the document store."""

    async def get_by_id(self, document_id: str) -> Document | None: ...
    async def list_by_status(self, statuses: Sequence[str]) -> list[Document]:
        """Documents in any of ``statuses``, ordered by title ascending."""
        ...


@runtime_checkable
class ExpiringStore(Protocol):
    """Key-value store whose entries vanish ``ttl_seconds`` after ``set``.

    ``get`` returning a value is the definition of "not yet expired".
    """

    async def get(self, key: str) -> Any | None: ...
    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool: ...
    async def delete(self, key: str) -> bool: ...


@runtime_checkable
class ActionTokenValidator(Protocol):
    """Issues and checks per-action security tokens for admin forms."""

    def issue(self, action: str) -> str: ...
    def verify(self, token: str, action: str) -> bool: ...


class StoreUnavailable(Exception):
    """The expiring store backend could not be reached or answered with an error.

    ``set``/``delete`` returning False means the store refused the
    operation; this exception means it never got an answer.
    """

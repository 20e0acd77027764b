"""In-memory collaborator implementations for local development.

These are used when ENVIRONMENT=local and throughout the tests. They
satisfy the protocol interfaces but keep everything in dicts (no
persistence across restarts).
"""

from __future__ import annotations

import copy
import time
from typing import Any, Callable, Iterable, Sequence

from .protocols import Document

Clock = Callable[[], float]


class InMemoryDocumentStore:
    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: dict[str, Document] = {}
        for doc in documents:
            self.add(doc)

    def add(self, document: Document) -> Document:
        self._documents[document.id] = document
        return document

    async def get_by_id(self, document_id: str) -> Document | None:
        return self._documents.get(str(document_id))

    async def list_by_status(self, statuses: Sequence[str]) -> list[Document]:
        wanted = set(statuses)
        return sorted(
            (d for d in self._documents.values() if d.status in wanted),
            key=lambda d: d.title,
        )


class InMemoryExpiringStore:
    """Dict-backed expiring store.

    Entries are dropped lazily on access once ``clock()`` reaches their
    deadline. ``fail_writes`` / ``fail_deletes`` make ``set`` / ``delete``
    report failure, mirroring a backend that refuses the operation.
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self.fail_writes = False
        self.fail_deletes = False

    def _purge(self, key: str) -> None:
        entry = self._entries.get(key)
        if entry is not None and self._clock() >= entry[1]:
            del self._entries[key]

    async def get(self, key: str) -> Any | None:
        self._purge(key)
        entry = self._entries.get(key)
        if entry is None:
            return None
        return copy.deepcopy(entry[0])

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        if self.fail_writes or ttl_seconds <= 0:
            return False
        try:
            deadline = self._clock() + ttl_seconds
        except OverflowError:
            return False
        self._entries[key] = (copy.deepcopy(value), deadline)
        return True

    async def delete(self, key: str) -> bool:
        self._purge(key)
        if self.fail_deletes or key not in self._entries:
            return False
        del self._entries[key]
        return True

    def keys(self) -> list[str]:
        for key in list(self._entries):
            self._purge(key)
        return sorted(self._entries)

"""Pytest configuration for drafts_for_friends tests."""
import sys
from pathlib import Path

# Add src/ to path for src-layout imports
_PROJECT_ROOT = Path(__file__).parent.parent
_SRC = _PROJECT_ROOT / 'src'
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import pytest

from drafts_for_friends.app.inmemory import InMemoryDocumentStore, InMemoryExpiringStore
from drafts_for_friends.app.protocols import Document
from drafts_for_friends.app.security.action_tokens import ActionTokenService
from drafts_for_friends.app.sharing.access import AccessGate
from drafts_for_friends.app.sharing.grants import GrantManager

START_TIME = 1_700_000_000.0
SITE_URL = 'https://blog.example.com'
TOKEN_SECRET = 'test-action-token-secret-0123456789abcdef'


class FakeClock:
    """Manually advanced time source (unix seconds)."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def sample_documents() -> list[Document]:
    return [
        Document(id='42', title='Upcoming launch', status='draft', content='secret plans'),
        Document(id='9', title='Awaiting review', status='pending'),
        Document(id='10', title='Scheduled post', status='future'),
        Document(id='7', title='Hello world', status='published', content='hi'),
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryExpiringStore(clock=clock)


@pytest.fixture
def documents():
    return InMemoryDocumentStore(sample_documents())


@pytest.fixture
def tokens():
    return ActionTokenService(TOKEN_SECRET)


@pytest.fixture
def manager(store, documents, tokens, clock):
    return GrantManager(store, documents, tokens, site_url=SITE_URL, clock=clock)


@pytest.fixture
def gate(store, clock):
    return AccessGate(store, clock=clock)

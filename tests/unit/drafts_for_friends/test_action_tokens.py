"""Tests for per-action admin form tokens.

Validates:
  - A token verifies only for the action it was issued for.
  - Tampered, foreign, expired and empty tokens fail closed.
"""

from __future__ import annotations

import time

import jwt
import pytest

from drafts_for_friends.app.security.action_tokens import (
    ACTION_CREATE_SHARE,
    ACTION_DELETE_SHARE,
    ACTION_EXTEND_SHARE,
    ADMIN_ACTIONS,
    TOKEN_ISSUER,
    ActionTokenService,
)

SECRET = 'unit-test-action-secret-0123456789abcdef'


@pytest.fixture
def service():
    return ActionTokenService(SECRET)


class TestIssueAndVerify:

    def test_actions(self):
        assert ADMIN_ACTIONS == (
            'dff_create_share',
            'dff_extend_share',
            'dff_delete_share',
        )

    @pytest.mark.parametrize('action', ADMIN_ACTIONS)
    def test_round_trip(self, service, action):
        assert service.verify(service.issue(action), action) is True

    def test_wrong_action_rejected(self, service):
        token = service.issue(ACTION_CREATE_SHARE)
        assert service.verify(token, ACTION_EXTEND_SHARE) is False
        assert service.verify(token, ACTION_DELETE_SHARE) is False

    def test_tokens_are_distinct(self, service):
        assert service.issue(ACTION_CREATE_SHARE) != service.issue(ACTION_CREATE_SHARE)

    def test_other_secret_rejected(self, service):
        other = ActionTokenService('another-secret-entirely-0123456789abcd')
        assert service.verify(other.issue(ACTION_CREATE_SHARE), ACTION_CREATE_SHARE) is False

    def test_tampered_token_rejected(self, service):
        token = service.issue(ACTION_CREATE_SHARE)
        tampered = token[:-2] + ('AA' if not token.endswith('AA') else 'BB')
        assert service.verify(tampered, ACTION_CREATE_SHARE) is False

    @pytest.mark.parametrize('token', ['', 'not-a-jwt', None, 123])
    def test_garbage_rejected(self, service, token):
        assert service.verify(token, ACTION_CREATE_SHARE) is False

    def test_expired_token_rejected(self, service):
        now = int(time.time())
        token = jwt.encode(
            {
                'iss': TOKEN_ISSUER,
                'action': ACTION_CREATE_SHARE,
                'iat': now - 7200,
                'exp': now - 3600,
            },
            SECRET,
            algorithm='HS256',
        )
        assert service.verify(token, ACTION_CREATE_SHARE) is False

    def test_missing_action_claim_rejected(self, service):
        now = int(time.time())
        token = jwt.encode(
            {'iss': TOKEN_ISSUER, 'iat': now, 'exp': now + 60},
            SECRET,
            algorithm='HS256',
        )
        assert service.verify(token, ACTION_CREATE_SHARE) is False

    def test_wrong_issuer_rejected(self, service):
        now = int(time.time())
        token = jwt.encode(
            {'iss': 'someone-else', 'action': ACTION_CREATE_SHARE, 'iat': now, 'exp': now + 60},
            SECRET,
            algorithm='HS256',
        )
        assert service.verify(token, ACTION_CREATE_SHARE) is False


class TestConstruction:

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            ActionTokenService('')

    @pytest.mark.parametrize('ttl', [0, -5])
    def test_non_positive_ttl_rejected(self, ttl):
        with pytest.raises(ValueError):
            ActionTokenService(SECRET, ttl_seconds=ttl)

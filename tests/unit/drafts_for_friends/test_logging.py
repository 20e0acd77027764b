"""Tests for the structlog processors used by the service."""

from __future__ import annotations

from drafts_for_friends.app.observability.logging import (
    _add_request_id,
    _resolve_json_output,
    build_pre_chain,
    redact_sensitive,
    request_id_ctx,
)


class TestRedactSensitive:

    def test_secret_and_tokens_redacted(self):
        event = {
            'event': 'grant_created',
            'draft_id': '42',
            'secret': 'AbCdEfGh12345678',
            'token': 'eyJ...',
            '_nonce': 'eyJ...',
            'share_url': 'https://blog.example.com/?p=42&secret=AbCdEfGh12345678',
        }
        out = redact_sensitive(None, 'info', event)
        assert out['secret'] == '<redacted>'
        assert out['token'] == '<redacted>'
        assert out['_nonce'] == '<redacted>'
        assert out['share_url'] == '<redacted>'
        assert out['draft_id'] == '42'
        assert out['event'] == 'grant_created'

    def test_empty_values_left_alone(self):
        out = redact_sensitive(None, 'info', {'event': 'x', 'secret': None, 'token': ''})
        assert out == {'event': 'x', 'secret': None, 'token': ''}


class TestRequestId:

    def test_request_id_added_when_bound(self):
        token = request_id_ctx.set('req-42')
        try:
            out = _add_request_id(None, 'info', {'event': 'x'})
        finally:
            request_id_ctx.reset(token)
        assert out['request_id'] == 'req-42'

    def test_no_request_id_outside_request(self):
        assert _add_request_id(None, 'info', {'event': 'x'}) == {'event': 'x'}


class TestPipeline:

    def test_redaction_follows_request_id(self):
        chain = build_pre_chain()
        assert chain.index(redact_sensitive) < len(chain) - 1
        assert chain.index(_add_request_id) < chain.index(redact_sensitive)

    def test_format_follows_environment(self, monkeypatch):
        monkeypatch.delenv('LOG_FORMAT', raising=False)
        assert _resolve_json_output(None, 'local') is False
        assert _resolve_json_output(None, 'production') is True
        assert _resolve_json_output(False, 'production') is False

    def test_log_format_env_overrides_environment(self, monkeypatch):
        monkeypatch.setenv('LOG_FORMAT', 'console')
        assert _resolve_json_output(None, 'production') is False
        monkeypatch.setenv('LOG_FORMAT', 'json')
        assert _resolve_json_output(None, 'local') is True

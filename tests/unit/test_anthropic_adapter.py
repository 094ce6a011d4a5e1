# tests/unit/test_anthropic_adapter.py

from __future__ import annotations
import sys
from pathlib import Path
from types import SimpleNamespace
import pytest

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

import cline.providers.anthropic_adapter as aa  # type: ignore
from cline.core.errors import MissingCredentialError, StreamClientError, StreamTransientError


def _event(kind, **fields):
    return SimpleNamespace(type=kind, **fields)


def _text(t):
    return _event("content_block_delta", index=0, delta=SimpleNamespace(type="text_delta", text=t))


EVENTS = [
    _event("message_start", message=SimpleNamespace(id="msg_1")),
    _event("content_block_start", index=0, content_block=SimpleNamespace(type="text", text="")),
    _text("Hel"),
    _event("content_block_delta", index=0, delta=SimpleNamespace(type="input_json_delta", partial_json="{}")),
    _text(""),
    _text("lo!"),
    _event("content_block_stop", index=0),
    _event("message_delta", delta=SimpleNamespace(stop_reason="end_turn")),
    _event("message_stop"),
]


class _FakeStream:
    def __init__(self, events, exc=None):
        self.events = events
        self.exc = exc
        self.closed = False
    def __iter__(self):
        yield from self.events
        if self.exc is not None:
            raise self.exc
    def close(self):
        self.closed = True


class _FakeMessages:
    def __init__(self, parent):
        self.parent = parent
    def create(self, **kwargs):
        self.parent.calls.append(kwargs)
        self.parent.last_stream = _FakeStream(self.parent.events, self.parent.stream_error)
        return self.parent.last_stream


class _FakeAnthropic:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.calls = []
        self.events = list(EVENTS)
        self.stream_error = None
        self.last_stream = None
        self.messages = _FakeMessages(self)


@pytest.fixture
def handler(monkeypatch):
    monkeypatch.setattr(aa, "Anthropic", _FakeAnthropic, raising=True)
    return aa.AnthropicHandler(api_key="sk-ant-test")


HISTORY = [
    {"role": "user", "content": "hi"},
    {"role": "assistant", "content": "hello"},
    {"role": "user", "content": "again"},
]


def test_only_text_deltas_become_chunks(handler):
    chunks = list(handler.create_message("sys", HISTORY))
    assert [c.content for c in chunks[:-1]] == ["Hel", "lo!"]
    assert chunks[-1].done and sum(c.done for c in chunks) == 1
    assert handler.client.last_stream.closed


def test_system_prompt_is_top_level_field(handler):
    list(handler.create_message("sys", HISTORY))
    sent = handler.client.calls[0]
    assert sent["system"] == "sys"
    assert sent["messages"] == HISTORY
    assert all(m["role"] != "system" for m in sent["messages"])


def test_vendor_defaults(handler):
    list(handler.create_message("sys", HISTORY))
    sent = handler.client.calls[0]
    assert sent["model"] == "claude-3-haiku-20240307"
    assert sent["temperature"] == 0.7
    assert sent["max_tokens"] == 4096
    assert sent["stream"] is True


def test_config_overrides(monkeypatch):
    monkeypatch.setattr(aa, "Anthropic", _FakeAnthropic, raising=True)
    h = aa.AnthropicHandler(api_key="k", model="claude-x", temperature=0.1, max_tokens=64)
    list(h.create_message("sys", HISTORY))
    sent = h.client.calls[0]
    assert (sent["model"], sent["temperature"], sent["max_tokens"]) == ("claude-x", 0.1, 64)


def test_missing_key_names_env_var(monkeypatch):
    monkeypatch.setattr(aa, "Anthropic", _FakeAnthropic, raising=True)
    with pytest.raises(MissingCredentialError) as ei:
        aa.AnthropicHandler(api_key="")
    assert ei.value.env_var == "ANTHROPIC_API_KEY"
    assert "anthropic" in str(ei.value)


def test_stream_error_classified(handler):
    class Overloaded(Exception):
        status_code = 529
    handler.client.stream_error = Overloaded("overloaded_error")
    with pytest.raises(StreamTransientError):
        list(handler.create_message("sys", HISTORY))


def test_auth_error_is_client_error(handler):
    class AuthError(Exception):
        status_code = 401
    handler.client.stream_error = AuthError("invalid x-api-key")
    with pytest.raises(StreamClientError):
        list(handler.create_message("sys", HISTORY))

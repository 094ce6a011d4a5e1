# tests/unit/test_agent.py

from __future__ import annotations
import sys
from pathlib import Path
import pytest

# Ensure "src" is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cline.core.agent import ClineAgent, McpServer, DEFAULT_SYSTEM_PROMPT, INTERRUPTED_REPLY  # type: ignore
from cline.core.cancellation import CancelToken
from cline.core.errors import StreamTransientError
from cline.core.history import SessionHistory
from cline.core.messages import StreamChunk


class RecordingUI:
    def __init__(self):
        self.infos, self.warns, self.errors = [], [], []
    def info(self, msg): self.infos.append(msg)
    def warn(self, msg): self.warns.append(msg)
    def error(self, msg): self.errors.append(msg)


class FakeHandler:
    model = "fake"

    def __init__(self, pieces=("hel", "lo"), fail_after=None):
        self.pieces = list(pieces)
        self.fail_after = fail_after
        self.calls = []

    def create_message(self, system_prompt, messages, *, cancel=None, deadline=None):
        self.calls.append((system_prompt, list(messages), cancel, deadline))

        def gen():
            for i, p in enumerate(self.pieces):
                if self.fail_after is not None and i == self.fail_after:
                    raise StreamTransientError("connection reset")
                if cancel is not None:
                    cancel.raise_if_cancelled()
                yield StreamChunk.text(p)
            yield StreamChunk.end()
        return gen()


def _agent(tmp_path, handler=None, **kw):
    return ClineAgent(RecordingUI(), settings_dir=tmp_path, handler=handler, **kw)


def test_placeholder_without_handler(tmp_path):
    agent = _agent(tmp_path)
    agent.history.append("user", "hello there")
    out = agent.chat("hello there")
    assert 'received: "hello there"' in out["content"]
    assert "placeholder" in out["content"]
    # no assistant turn recorded in degraded mode
    assert agent.history.to_list() == [{"role": "user", "content": "hello there"}]


def test_chat_accumulates_chunks_and_appends_reply(tmp_path):
    handler = FakeHandler(("Hel", "lo", "!"))
    agent = _agent(tmp_path, handler)
    agent.history.append("user", "hi")
    streamed = []

    out = agent.chat("hi", on_text=streamed.append)

    assert out == {"content": "Hello!"}
    assert "".join(streamed) == out["content"]
    assert agent.history.to_list()[-1] == {"role": "assistant", "content": "Hello!"}
    system_prompt, sent, _, deadline = handler.calls[0]
    assert system_prompt == DEFAULT_SYSTEM_PROMPT
    assert sent == [{"role": "user", "content": "hi"}]
    assert deadline is None


def test_chat_does_not_append_user_turn(tmp_path):
    handler = FakeHandler()
    agent = _agent(tmp_path, handler)
    agent.history.append("user", "q")
    agent.chat("q")
    assert [m["role"] for m in agent.history.to_list()] == ["user", "assistant"]


def test_midstream_failure_becomes_error_response(tmp_path):
    handler = FakeHandler(("one", "two", "three"), fail_after=2)
    agent = _agent(tmp_path, handler)
    agent.history.append("user", "go")

    out = agent.chat("go")

    assert out["content"].startswith("Error processing your request:")
    assert "connection reset" in out["content"]
    assert agent.ui.errors and "connection reset" in agent.ui.errors[0]
    # partial text is kept as the assistant turn
    assert agent.history.to_list()[-1] == {"role": "assistant", "content": "onetwo"}


def test_failure_before_any_chunk_records_error_reply(tmp_path):
    handler = FakeHandler(("x",), fail_after=0)
    agent = _agent(tmp_path, handler)
    agent.history.append("user", "one")
    out = agent.chat("one")

    assert "Error" in out["content"]
    assert agent.history.to_list()[-1] == {"role": "assistant", "content": out["content"]}

    handler.fail_after = None
    agent.history.append("user", "two")
    agent.chat("two")
    assert [m["role"] for m in handler.calls[1][1]] == ["user", "assistant", "user"]


class InterruptingHandler(FakeHandler):
    def create_message(self, system_prompt, messages, *, cancel=None, deadline=None):
        self.calls.append((system_prompt, list(messages), cancel, deadline))

        def gen():
            for p in self.pieces:
                yield StreamChunk.text(p)
            raise KeyboardInterrupt
        return gen()


def test_keyboard_interrupt_keeps_partial_text_and_reraises(tmp_path):
    agent = _agent(tmp_path, InterruptingHandler(("partial",)))
    agent.history.append("user", "one")

    with pytest.raises(KeyboardInterrupt):
        agent.chat("one")

    assert agent.history.to_list()[-1] == {"role": "assistant", "content": "partial"}
    assert agent.ui.errors == []

    handler = FakeHandler(("ok",))
    agent.set_handler(handler)
    agent.history.append("user", "two")
    assert agent.chat("two") == {"content": "ok"}
    assert [m["role"] for m in handler.calls[0][1]] == ["user", "assistant", "user"]


def test_keyboard_interrupt_before_text_records_marker(tmp_path):
    agent = _agent(tmp_path, InterruptingHandler(()))
    agent.history.append("user", "one")
    with pytest.raises(KeyboardInterrupt):
        agent.chat("one")
    assert agent.history.to_list()[-1] == {"role": "assistant", "content": INTERRUPTED_REPLY}


def test_cancelled_stream_is_reported_not_raised(tmp_path):
    token = CancelToken()
    token.cancel()
    agent = _agent(tmp_path, FakeHandler())
    agent.history.append("user", "go")
    out = agent.chat("go", cancel=token)
    assert "cancelled" in out["content"].lower()


def test_timeout_becomes_deadline(tmp_path):
    handler = FakeHandler()
    agent = _agent(tmp_path, handler)
    agent.history.append("user", "go")
    agent.chat("go", timeout=30)
    deadline = handler.calls[0][3]
    assert deadline is not None and 0 < deadline.remaining() <= 30


def test_set_handler_keeps_history(tmp_path):
    agent = _agent(tmp_path)
    agent.history.append("user", "first")
    agent.chat("first")
    agent.set_handler(FakeHandler(("ok",)))
    agent.history.append("user", "second")
    assert agent.chat("second") == {"content": "ok"}
    assert [m["content"] for m in agent.history.to_list()] == ["first", "second", "ok"]


def test_history_bound_applies_to_agent(tmp_path):
    agent = _agent(tmp_path, FakeHandler(("r",)), history=SessionHistory(max_messages=4))
    for i in range(3):
        agent.history.append("user", f"q{i}")
        agent.chat(f"q{i}")
    assert len(agent.history) == 4
    assert agent.history.to_list()[0]["content"] == "q1"


def test_bootstrap_creates_settings_dir_and_reports_debug(tmp_path):
    target = tmp_path / "nested" / ".cline"
    ui = RecordingUI()
    agent = ClineAgent.bootstrap(ui, mcp_server="http://mcp:1", settings_dir=target, debug=True)
    assert target.is_dir()
    assert any("http://mcp:1" in m for m in ui.infos)
    agent.on_mcp_servers_updated([McpServer("files", "connected")])
    assert ui.infos[-1] == "- files: connected"


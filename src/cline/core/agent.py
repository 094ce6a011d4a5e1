from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .cancellation import CancelToken, Deadline
from .history import SessionHistory
from .ports import ApiHandler, UIHost

_LOGGER = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are Cline, a helpful coding assistant."
INTERRUPTED_REPLY = "[response interrupted]"


def default_settings_dir() -> Path:
    env = os.environ.get("CLINE_SETTINGS")
    return Path(env) if env else Path.home() / ".cline"


@dataclass(frozen=True)
class McpServer:
    name: str
    status: str  # "connecting" | "connected" | "disconnected"


class ClineAgent:
    """
    Single entry point for one conversation.

    Turn contract: the caller appends the user turn to `history` and then calls
    chat(). chat() never appends the user turn itself; it appends exactly one
    assistant turn per call with a handler, whether the stream finished, failed
    or was interrupted. KeyboardInterrupt is re-raised after recording.
    """

    def __init__(
        self,
        ui: UIHost,
        *,
        mcp_server: str = "http://127.0.0.1:8080",
        settings_dir: Optional[Path] = None,
        debug: bool = False,
        handler: Optional[ApiHandler] = None,
        history: Optional[SessionHistory] = None,
        system_prompt: Optional[str] = None,
    ):
        self.ui = ui
        self.mcp_server = mcp_server
        self.settings_dir = Path(settings_dir) if settings_dir else default_settings_dir()
        self.debug = debug
        self.handler = handler
        self.history = history if history is not None else SessionHistory()
        self.system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT

    @classmethod
    def bootstrap(cls, ui: UIHost, **kwargs) -> "ClineAgent":
        agent = cls(ui, **kwargs)
        agent.settings_dir.mkdir(parents=True, exist_ok=True)
        if agent.debug:
            agent.ui.info(f"Initialized with MCP server: {agent.mcp_server}")
            agent.ui.info(f"Settings directory: {agent.settings_dir}")
        return agent

    def set_handler(self, handler: Optional[ApiHandler]) -> None:
        self.handler = handler

    def chat(
        self,
        text: str,
        *,
        on_text: Optional[Callable[[str], None]] = None,
        cancel: Optional[CancelToken] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, str]:
        if self.handler is None:
            if self.debug:
                self.ui.info("No API handler available, using placeholder response")
            return {
                "content": f'Cline CLI received: "{text}"\n\n'
                           "This is a placeholder response. API integration is not configured."
            }

        if self.debug:
            self.ui.info(f"Processing input: {text}")
        last = self.history.last
        if last is None or last.role != "user":
            _LOGGER.warning("chat() called without a trailing user turn in history")

        parts: List[str] = []
        error: Optional[Exception] = None
        completed = False
        try:
            stream = self.handler.create_message(
                self.system_prompt,
                self.history.to_list(),
                cancel=cancel,
                deadline=Deadline.maybe_after(timeout),
            )
            for chunk in stream:
                if chunk.done:
                    continue
                parts.append(chunk.content)
                if on_text is not None:
                    on_text(chunk.content)
            completed = True
        except Exception as e:
            error = e
        finally:
            # Runs on KeyboardInterrupt too, so user/assistant turns keep alternating
            self.history.append("assistant", self._reply_text(parts, error, completed))

        if error is not None:
            _LOGGER.debug("Stream failed after %d chunks", len(parts), exc_info=error)
            self.ui.error(f"Error processing chat: {error}")
            return {"content": f"Error processing your request: {error}"}
        return {"content": "".join(parts)}

    @staticmethod
    def _reply_text(parts: List[str], error: Optional[Exception], completed: bool) -> str:
        """Text recorded as the assistant turn; partial text wins over any placeholder."""
        content = "".join(parts)
        if content or completed:
            return content
        if error is not None:
            return f"Error processing your request: {error}"
        return INTERRUPTED_REPLY

    def on_mcp_servers_updated(self, servers: List[McpServer]) -> None:
        if self.debug:
            self.ui.info(f"MCP servers updated: {len(servers)} servers")
            for server in servers:
                self.ui.info(f"- {server.name}: {server.status}")

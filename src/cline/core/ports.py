from __future__ import annotations
from typing import Protocol, Iterator, List, Dict, Optional

from .cancellation import CancelToken, Deadline
from .messages import StreamChunk


class ApiHandler(Protocol):
    """
    Interface the core uses to talk to any LLM backend.
    """

    # Optional: surface the model name for logging
    model: str

    def create_message(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        *,
        cancel: Optional[CancelToken] = None,
        deadline: Optional[Deadline] = None,
    ) -> Iterator[StreamChunk]:
        """
        Streaming call. 'messages' is the full bounded history:
        [{'role': 'user'|'assistant', 'content': '...'}, ...]
        Yields content chunks as they arrive, then exactly one done chunk.
        """
        ...


class UIHost(Protocol):
    """Severity-tagged text sinks. The core never writes to a terminal itself."""

    def info(self, msg: str) -> None: ...

    def warn(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...


class SecretStore(Protocol):
    def get(self, service: str, account: str) -> Optional[str]: ...

    def set(self, service: str, account: str, secret: str) -> None: ...

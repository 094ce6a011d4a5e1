from __future__ import annotations
from typing import Dict, List, Optional

from .messages import Message

DEFAULT_MAX_MESSAGES = 20


class SessionHistory:
    """
    Bounded, ordered in-memory conversation for one run.
    - append() adds at the tail, then drops from the head until len <= max_messages
    - to_list() returns provider-ready dicts (a copy; mutating it does not touch the history)
    Single writer: only the owning agent/loop mutates it.
    """

    def __init__(self, max_messages: int = DEFAULT_MAX_MESSAGES):
        if int(max_messages) < 1:
            raise ValueError("max_messages must be at least 1")
        self.max_messages = int(max_messages)
        self._messages: List[Message] = []

    def append(self, role: str, content: str) -> None:
        self._messages.append(Message(role=role, content=content))
        overflow = len(self._messages) - self.max_messages
        if overflow > 0:
            del self._messages[:overflow]

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def to_list(self) -> List[Dict[str, str]]:
        return [m.to_dict() for m in self._messages]

    def clear(self) -> None:
        self._messages = []

    def __len__(self) -> int:
        return len(self._messages)

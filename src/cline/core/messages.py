from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Literal, Optional, get_args

Role = Literal["user", "assistant"]
ROLES = frozenset(get_args(Role))


@dataclass(frozen=True)
class Message:
    """One turn of the conversation. The system prompt is never stored here."""
    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role '{self.role}'. Expected one of {sorted(ROLES)}")
        if not isinstance(self.content, str):
            raise ValueError("Message content must be a string")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class StreamChunk:
    """
    One increment of a streamed response: either a non-empty text fragment
    or the terminal `done` marker, never both.
    """
    content: Optional[str] = None
    done: bool = False

    def __post_init__(self) -> None:
        if self.done and self.content is not None:
            raise ValueError("A done chunk cannot carry content")
        if not self.done and not self.content:
            raise ValueError("A content chunk needs non-empty text")

    @classmethod
    def text(cls, content: str) -> "StreamChunk":
        return cls(content=content)

    @classmethod
    def end(cls) -> "StreamChunk":
        return cls(done=True)

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProviderKind(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    ECHO = "echo"


# Written to config.json the first time it is missing
DEFAULT_MODELS = {
    ProviderKind.OPENAI: "gpt-4o-mini",
    ProviderKind.ANTHROPIC: "claude-3-haiku-20240307",
}

DEFAULT_TEMPERATURE = 0.7


@dataclass(frozen=True)
class ApiConfiguration:
    """
    Everything an adapter needs to talk to one vendor.
    temperature / max_tokens left as None mean "use the vendor default".
    """
    provider: str
    api_key: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_tokens is not None:
            if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int) or self.max_tokens <= 0:
                raise ValueError(f"max_tokens must be a positive integer, got {self.max_tokens!r}")
        if self.temperature is not None and not isinstance(self.temperature, (int, float)):
            raise ValueError(f"temperature must be a number, got {self.temperature!r}")

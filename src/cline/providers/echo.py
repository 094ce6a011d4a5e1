from __future__ import annotations
from typing import Any, Iterable, List, Optional
import time

from cline.core.api import ApiConfiguration, ProviderKind
from cline.providers.base import StreamingHandler
from cline.providers.registry import ProviderRegistry

_LOREM_50 = (
    "Lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua Curabitur non nulla sit amet nisl "
    "tempor convallis quis ac lectus Phasellus viverra nulla ut metus varius laoreet "
    "Quisque rutrum Aenean imperdiet Etiam ultricies nisi vel augue Curabitur ullamcorper ultricies nisi"
).split()


@ProviderRegistry.register(ProviderKind.ECHO.value)
class EchoHandler(StreamingHandler):
    """
    Offline stub that streams a fixed 50-word lorem ipsum.
    Yields one word at a time with a small delay to simulate tokens. Needs no API key.
    """
    provider = ProviderKind.ECHO.value
    model = "echo-lorem"

    def __init__(self, token_delay: float = 0.0, words: Optional[List[str]] = None):
        self.token_delay = float(token_delay)
        self.words = list(words) if words is not None else list(_LOREM_50)

    @classmethod
    def from_config(cls, config: ApiConfiguration) -> "EchoHandler":
        return cls()

    def _open_stream(self, system_prompt, messages, timeout) -> Iterable[Any]:
        def gen():
            last_idx = len(self.words) - 1
            for i, w in enumerate(self.words):
                yield w + ("" if i == last_idx else " ")
                if self.token_delay > 0:
                    time.sleep(self.token_delay)
        return gen()

    def _frame_text(self, frame: Any) -> Optional[str]:
        return frame

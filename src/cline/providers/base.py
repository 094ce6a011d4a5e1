from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator, List, Optional

from cline.core.cancellation import CancelToken, Deadline
from cline.core.errors import classify_exception
from cline.core.messages import StreamChunk

_LOGGER = logging.getLogger(__name__)


class StreamingHandler(ABC):
    """
    Shared streaming loop for vendor adapters.

    Subclasses implement:
    - _open_stream(): issue exactly one streaming request and return the vendor's frame iterator
    - _frame_text(): pull the text increment out of one frame (None/'' when the frame carries none)

    The loop turns frames into StreamChunks, checks the cancel token and the
    deadline at every frame, closes the vendor stream when it stops early,
    and maps SDK exceptions to StreamFailure. No retries.
    """

    provider: str = "unknown"
    model: str

    @abstractmethod
    def _open_stream(
        self, system_prompt: str, messages: List[Dict[str, str]], timeout: Optional[float]
    ) -> Iterable[Any]:
        ...

    @abstractmethod
    def _frame_text(self, frame: Any) -> Optional[str]:
        ...

    def create_message(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        *,
        cancel: Optional[CancelToken] = None,
        deadline: Optional[Deadline] = None,
    ) -> Iterator[StreamChunk]:
        # Request body is fixed at call time
        messages = [dict(m) for m in messages]
        return self._stream(system_prompt, messages, cancel, deadline)

    def _stream(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        cancel: Optional[CancelToken],
        deadline: Optional[Deadline],
    ) -> Iterator[StreamChunk]:
        self._check(cancel, deadline)
        timeout = deadline.remaining() if deadline is not None else None
        _LOGGER.debug("%s stream: model=%s messages=%d", self.provider, self.model, len(messages))

        try:
            stream = self._open_stream(system_prompt, messages, timeout)
        except Exception as e:
            raise classify_exception(e) from e

        try:
            frames = iter(stream)
            while True:
                self._check(cancel, deadline)
                try:
                    frame = next(frames)
                except StopIteration:
                    break
                except Exception as e:
                    raise classify_exception(e) from e
                piece = self._frame_text(frame)
                if piece:
                    yield StreamChunk.text(piece)
        finally:
            _close_quietly(stream)

        yield StreamChunk.end()

    @staticmethod
    def _check(cancel: Optional[CancelToken], deadline: Optional[Deadline]) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled()
        if deadline is not None:
            deadline.raise_if_expired()


def _close_quietly(stream: Any) -> None:
    close = getattr(stream, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception as e:
        _LOGGER.debug("Ignoring error while closing stream: %s", e)


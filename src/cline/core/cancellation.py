from __future__ import annotations
import threading
import time
from typing import Optional

from .errors import StreamCancelled, StreamTimeout


class CancelToken:
    """
    Thread-safe cancel signal for one in-flight stream.
    Adapters check it before the request and at every inbound frame.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise StreamCancelled("Stream cancelled")


class Deadline:
    """Absolute point on the monotonic clock by which a stream must finish."""

    def __init__(self, expires_at: float):
        self.expires_at = expires_at

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        if seconds <= 0:
            raise ValueError("Deadline timeout must be positive")
        return cls(time.monotonic() + float(seconds))

    @classmethod
    def maybe_after(cls, seconds: Optional[float]) -> Optional["Deadline"]:
        return cls.after(seconds) if seconds is not None else None

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def raise_if_expired(self) -> None:
        if self.expired:
            raise StreamTimeout("Stream deadline exceeded")

from __future__ import annotations
from typing import Optional


class ClineError(Exception):
    """Base class for every error raised by cline."""


class ProviderError(ClineError):
    """Base class for provider-level failures."""


class ProviderClientError(ProviderError):
    """
    Non-recoverable: caller/config issue (missing key, unknown provider, bad
    parameters). The fix is to change input/config, not to try again.
    """


class MissingCredentialError(ProviderClientError):
    def __init__(self, provider: str, env_var: Optional[str] = None):
        self.provider = provider
        self.env_var = env_var or f"{provider.upper()}_API_KEY"
        super().__init__(
            f"No API key found for {provider}. Set it via environment variable "
            f"{self.env_var} or run 'cline config set-key {provider}'"
        )


class UnsupportedProviderError(ProviderClientError):
    def __init__(self, provider: str, supported: Optional[list] = None):
        self.provider = provider
        self.supported = sorted(supported or [])
        msg = f"Unsupported API provider: {provider}"
        if self.supported:
            msg += f" (expected one of: {', '.join(self.supported)})"
        super().__init__(msg)


class StreamFailure(ProviderError):
    """Raised while draining a provider stream."""


class StreamClientError(StreamFailure):
    """
    Vendor rejected the request: 4xx invalid request, auth, unknown model,
    unsupported parameter, etc.
    """


class StreamTransientError(StreamFailure):
    """
    Rate limits, timeouts, network hiccups, 5xx. Sending the turn again
    later may succeed.
    """


class StreamTimeout(StreamTransientError):
    """The per-turn deadline expired before the stream finished."""


class StreamCancelled(StreamFailure):
    """The stream was cancelled through its CancelToken."""


def classify_exception(exc: Exception) -> StreamFailure:
    """
    Convert SDK exceptions into neutral stream failures.
    Avoid hard dependency on specific SDK exception classes by inspecting attributes/message.
    """
    if isinstance(exc, StreamFailure):
        return exc

    status = getattr(exc, "status_code", None) or getattr(exc, "http_status", None)
    msg = str(exc) or exc.__class__.__name__

    if status is not None:
        s = int(status)
        if s == 429 or s >= 500:
            return StreamTransientError(msg)
        return StreamClientError(msg)

    if isinstance(exc, TimeoutError):
        return StreamTransientError(msg)

    lower = msg.lower()
    if any(k in lower for k in ("rate limit", "temporarily unavailable", "timeout", "timed out", "connection")):
        return StreamTransientError(msg)
    if any(k in lower for k in ("invalid_request_error", "unsupported", "parameter", "authentication")):
        return StreamClientError(msg)
    return StreamTransientError(msg)

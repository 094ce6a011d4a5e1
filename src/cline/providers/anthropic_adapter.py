# src/cline/providers/anthropic_adapter.py
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from anthropic import Anthropic

from cline.core.api import ApiConfiguration, DEFAULT_MODELS, DEFAULT_TEMPERATURE, ProviderKind
from cline.core.errors import MissingCredentialError
from cline.providers.base import StreamingHandler
from cline.providers.registry import ProviderRegistry

DEFAULT_MAX_TOKENS = 4096


@ProviderRegistry.register(ProviderKind.ANTHROPIC.value)
class AnthropicHandler(StreamingHandler):
    """
    Messages API adapter:
    - system prompt is the top-level 'system' field, never part of 'messages'
    - max_tokens is mandatory for this vendor, so it always has a value
    - only content_block_delta events with a text delta produce chunks
    """
    provider = ProviderKind.ANTHROPIC.value

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        if not api_key:
            raise MissingCredentialError(self.provider)
        self.model = model or DEFAULT_MODELS[ProviderKind.ANTHROPIC]
        client_kwargs: Dict[str, Any] = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        self.client = Anthropic(**client_kwargs)

        self.temperature = DEFAULT_TEMPERATURE if temperature is None else float(temperature)
        self.max_tokens = DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens

    @classmethod
    def from_config(cls, config: ApiConfiguration) -> "AnthropicHandler":
        return cls(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    def _build_args(self, system_prompt: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "system": system_prompt,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": True,
        }

    def _open_stream(self, system_prompt, messages, timeout) -> Iterable[Any]:
        args = self._build_args(system_prompt, messages)
        if timeout is not None:
            args["timeout"] = timeout
        return self.client.messages.create(**args)

    def _frame_text(self, event: Any) -> Optional[str]:
        if getattr(event, "type", None) != "content_block_delta":
            return None
        delta = getattr(event, "delta", None)
        if getattr(delta, "type", None) != "text_delta":
            return None
        return getattr(delta, "text", None)

# src/cline/providers/openai_adapter.py
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from openai import OpenAI

from cline.core.api import ApiConfiguration, DEFAULT_MODELS, DEFAULT_TEMPERATURE, ProviderKind
from cline.core.errors import MissingCredentialError
from cline.providers.base import StreamingHandler
from cline.providers.registry import ProviderRegistry


@ProviderRegistry.register(ProviderKind.OPENAI.value)
class OpenAIHandler(StreamingHandler):
    """
    Chat Completions adapter:
    - system prompt goes in as the first 'system' message
    - max_tokens is only sent when configured
    """
    provider = ProviderKind.OPENAI.value

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
        self.model = model or DEFAULT_MODELS[ProviderKind.OPENAI]
        client_kwargs: Dict[str, Any] = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        self.client = OpenAI(**client_kwargs)

        self.temperature = DEFAULT_TEMPERATURE if temperature is None else float(temperature)
        self.max_tokens = max_tokens

    @classmethod
    def from_config(cls, config: ApiConfiguration) -> "OpenAIHandler":
        return cls(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    def _build_args(self, system_prompt: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        formatted = [{"role": "system", "content": system_prompt}]
        formatted += [{"role": m["role"], "content": m["content"]} for m in messages]
        args: Dict[str, Any] = {
            "model": self.model,
            "messages": formatted,
            "temperature": self.temperature,
            "stream": True,
        }
        if self.max_tokens is not None:
            args["max_tokens"] = self.max_tokens
        return args

    def _open_stream(self, system_prompt, messages, timeout) -> Iterable[Any]:
        args = self._build_args(system_prompt, messages)
        if timeout is not None:
            args["timeout"] = timeout
        return self.client.chat.completions.create(**args)

    def _frame_text(self, frame: Any) -> Optional[str]:
        # Usage-only and role-only frames carry no choices / no content
        try:
            return frame.choices[0].delta.content
        except (AttributeError, IndexError, TypeError):
            return None

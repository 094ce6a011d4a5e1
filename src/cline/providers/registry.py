from __future__ import annotations
from typing import Dict, List, Type, Callable
from importlib import import_module

from cline.core.api import ApiConfiguration
from cline.core.errors import UnsupportedProviderError
from cline.core.ports import ApiHandler


class ProviderRegistry:
    _classes: Dict[str, Type] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[Type], Type]:
        name = name.lower()
        def deco(klass: Type) -> Type:
            cls._classes[name] = klass
            return klass
        return deco

    @classmethod
    def get(cls, name: str) -> Type:
        key = (name or "").lower()
        if key not in cls._classes:
            raise UnsupportedProviderError(name, cls.names())
        return cls._classes[key]

    @classmethod
    def names(cls) -> List[str]:
        return sorted(cls._classes)

    @classmethod
    def ensure_imports(cls) -> None:
        """
        Import built-in adapters so their @register decorators run.
        Call once before get().
        """
        import_module("cline.providers.openai_adapter")
        import_module("cline.providers.anthropic_adapter")
        import_module("cline.providers.echo")


def build_api_handler(config: ApiConfiguration) -> ApiHandler:
    """
    Pick the adapter for config.provider (case-insensitive) and construct it.
    Adapters validate their own required fields and raise MissingCredentialError.
    """
    ProviderRegistry.ensure_imports()
    Adapter = ProviderRegistry.get(config.provider)
    return Adapter.from_config(config)

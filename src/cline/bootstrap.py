from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

from .config_loader import load_or_create_config
from .core.agent import DEFAULT_SYSTEM_PROMPT, default_settings_dir
from .core.api import ApiConfiguration
from .core.ports import UIHost
from .providers.registry import ProviderRegistry, build_api_handler
from .secrets.keys import CredentialResolver

_LOGGER = logging.getLogger(__name__)


def load_env_files(settings_dir: Path, env_file: Optional[Path] = None, ui: Optional[UIHost] = None) -> Optional[Path]:
    """
    Load a .env file into os.environ (existing variables win).
    An explicit env_file is used as-is; otherwise ./.env, then <settings_dir>/.env.
    Returns the file that was loaded, if any.
    """
    if env_file is not None:
        env_path = Path(env_file).expanduser().resolve()
        if env_path.exists():
            load_dotenv(env_path)
            return env_path
        if ui is not None:
            ui.warn(f"Warning: Specified .env file not found at {env_path}")
        return None

    for candidate in (Path.cwd() / ".env", settings_dir / ".env"):
        if candidate.exists():
            load_dotenv(candidate)
            return candidate
    return None


def load_system_prompt() -> str:
    sys_prompt_path = Path(__file__).resolve().parent / "prompts" / "system.txt"
    if sys_prompt_path.exists():
        return sys_prompt_path.read_text(encoding="utf-8").strip() or DEFAULT_SYSTEM_PROMPT
    return DEFAULT_SYSTEM_PROMPT


def build_api_configuration(
    cfg: Dict[str, Any],
    resolver: CredentialResolver,
    *,
    provider: Optional[str] = None,
    model: Optional[str] = None,
) -> ApiConfiguration:
    """
    Merge CLI overrides, the settings file and the resolved credential.
    provider: flag > defaultProvider. model: flag > providers.<name>.model > adapter default.
    """
    name = (provider or cfg["defaultProvider"]).strip().lower()
    ProviderRegistry.ensure_imports()
    ProviderRegistry.get(name)  # unknown names fail before any key lookup
    provider_cfg = (cfg.get("providers") or {}).get(name) or {}

    return ApiConfiguration(
        provider=name,
        api_key=resolver.resolve(name),
        model=model or provider_cfg.get("model"),
        base_url=provider_cfg.get("baseUrl"),
        temperature=provider_cfg.get("temperature"),
        max_tokens=provider_cfg.get("maxTokens"),
    )


def build_app(
    *,
    settings_dir: Optional[Path] = None,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    env_file: Optional[Path] = None,
    resolver: Optional[CredentialResolver] = None,
    ui: Optional[UIHost] = None,
) -> Dict[str, Any]:
    """
    Composition root: load .env and settings, resolve the key, build the handler.
    Raises ConfigError, UnsupportedProviderError or MissingCredentialError.
    Returns: dict with cfg, paths, api_config, handler, system_prompt.
    """
    settings_dir = Path(settings_dir) if settings_dir else default_settings_dir()
    env_loaded = load_env_files(settings_dir, env_file, ui)
    if env_loaded:
        _LOGGER.debug("Loaded environment variables from %s", env_loaded)

    cfg = load_or_create_config(settings_dir)
    resolver = resolver or CredentialResolver()

    api_config = build_api_configuration(cfg, resolver, provider=provider, model=model)
    _LOGGER.debug("Using provider: %s (model=%s)", api_config.provider, api_config.model)
    handler = build_api_handler(api_config)

    return {
        "cfg": cfg,
        "paths": {"settings_dir": settings_dir, "env_file": env_loaded},
        "api_config": api_config,
        "handler": handler,
        "system_prompt": load_system_prompt(),
    }

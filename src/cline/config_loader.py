# src/cline/config_loader.py

from __future__ import annotations
import copy
import json
from pathlib import Path
from typing import Any, Dict

import yaml

from cline.core.api import DEFAULT_MODELS, ProviderKind


class ConfigError(ValueError):
    pass


DEFAULT_CONFIG: Dict[str, Any] = {
    "defaultProvider": ProviderKind.OPENAI.value,
    "providers": {kind.value: {"model": model} for kind, model in DEFAULT_MODELS.items()},
}

CONFIG_FILE = "config.json"


def _read(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    is_yaml = path.suffix.lower() in (".yaml", ".yml")
    try:
        return yaml.safe_load(text) if is_yaml else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Config is not valid {'YAML' if is_yaml else 'JSON'}: {path}: {e}")


def _validate(raw: Any, path: Path) -> Dict[str, Any]:
    if not isinstance(raw, dict) or not raw:
        raise ConfigError(f"Config is empty or not an object: {path}")

    default = raw.get("defaultProvider")
    if not isinstance(default, str) or not default.strip():
        raise ConfigError("'defaultProvider' must be a non-empty string")

    providers = raw.get("providers", {})
    if providers is None:
        providers = {}
    if not isinstance(providers, dict):
        raise ConfigError("'providers' must be an object")
    for name, pcfg in providers.items():
        if pcfg is None:
            providers[name] = {}
            continue
        if not isinstance(pcfg, dict):
            raise ConfigError(f"'providers.{name}' must be an object")
        for key in ("model", "baseUrl"):
            if key in pcfg and pcfg[key] is not None and not isinstance(pcfg[key], str):
                raise ConfigError(f"'providers.{name}.{key}' must be a string")
        if "temperature" in pcfg and pcfg["temperature"] is not None:
            if isinstance(pcfg["temperature"], bool) or not isinstance(pcfg["temperature"], (int, float)):
                raise ConfigError(f"'providers.{name}.temperature' must be a number")
        if "maxTokens" in pcfg and pcfg["maxTokens"] is not None:
            mt = pcfg["maxTokens"]
            if isinstance(mt, bool) or not isinstance(mt, int) or mt <= 0:
                raise ConfigError(f"'providers.{name}.maxTokens' must be a positive integer")

    # Normalise provider names; lookups are case-insensitive
    raw["defaultProvider"] = default.strip().lower()
    raw["providers"] = {str(k).lower(): v for k, v in providers.items()}
    return raw


def load_config(path: Path) -> Dict[str, Any]:
    if not path or not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    return _validate(_read(path), path)


def load_or_create_config(settings_dir: Path) -> Dict[str, Any]:
    """
    Read <settings_dir>/config.json, writing DEFAULT_CONFIG there first if it is missing.
    """
    settings_dir.mkdir(parents=True, exist_ok=True)
    path = settings_dir / CONFIG_FILE
    if not path.exists():
        path.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n", encoding="utf-8")
        return copy.deepcopy(DEFAULT_CONFIG)
    return load_config(path)

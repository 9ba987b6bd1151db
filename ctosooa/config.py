"""Configuration loading for ctosooa (.ctosooa.yml)."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".ctosooa.yml"

BACKENDS: tuple[str, ...] = ("api", "cli", "terminal")

DEFAULT_BACKEND = "api"
DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_EXECUTABLE = "claude"
DEFAULT_REQUEST_TIMEOUT = 120.0
DEFAULT_LIMIT = 50

ENV_API_KEY = "ANTHROPIC_API_KEY"
ENV_BACKEND = "CTOSOOA_BACKEND"
ENV_MODEL = "CTOSOOA_MODEL"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class AssistantConfig:
    """Settings for reaching the AI assistant."""

    backend: str = DEFAULT_BACKEND
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    executable: str = DEFAULT_EXECUTABLE
    terminal: List[str] = field(default_factory=list)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class AnalyseConfig:
    """Settings for the analyse command."""

    limit: int = DEFAULT_LIMIT


@dataclass
class CtosooaConfig:
    """Represents the settings defined in .ctosooa.yml plus environment overrides."""

    root: Path
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    analyse: AnalyseConfig = field(default_factory=AnalyseConfig)


def load_config(
    config_path: Path, *, environ: Mapping[str, str] | None = None
) -> CtosooaConfig:
    """Load configuration from disk and apply environment overrides."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    assistant = AssistantConfig()
    assistant_data = _as_dict(data.get("assistant"))
    if assistant_data:
        assistant.backend = _as_str(assistant_data.get("backend")) or assistant.backend
        assistant.model = _as_str(assistant_data.get("model")) or assistant.model
        assistant.max_tokens = _as_int(assistant_data.get("max_tokens")) or assistant.max_tokens
        assistant.base_url = _as_str(assistant_data.get("base_url")) or assistant.base_url
        assistant.api_key = _as_str(assistant_data.get("api_key"))
        assistant.executable = _as_str(assistant_data.get("executable")) or assistant.executable
        assistant.terminal = _as_str_list(assistant_data.get("terminal"))
        assistant.request_timeout = (
            _as_float(assistant_data.get("request_timeout")) or assistant.request_timeout
        )

    if env.get(ENV_BACKEND):
        assistant.backend = env[ENV_BACKEND]
    if env.get(ENV_MODEL):
        assistant.model = env[ENV_MODEL]
    if env.get(ENV_API_KEY):
        assistant.api_key = env[ENV_API_KEY]

    if assistant.backend not in BACKENDS:
        raise ConfigError(
            f"Unknown assistant backend '{assistant.backend}'; expected one of {', '.join(BACKENDS)}"
        )

    analyse = AnalyseConfig()
    analyse_data = _as_dict(data.get("analyse"))
    if analyse_data:
        limit = _as_int(analyse_data.get("limit"))
        if limit is not None:
            analyse.limit = limit

    return CtosooaConfig(root=root, assistant=assistant, analyse=analyse)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Could not read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []

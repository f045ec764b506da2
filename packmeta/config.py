"""Configuration loading for packmeta (.packmeta.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import PackError

CONFIG_FILE_NAME = ".packmeta.yml"
DEFAULT_BUILD_CONFIG = "Release"


class ConfigError(PackError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class PackConfig:
    """Represents the settings defined in .packmeta.yml."""

    root: Path
    build_config: str = DEFAULT_BUILD_CONFIG
    dependencies_file: Optional[Path] = None
    exclude_paths: List[str] = field(default_factory=list)
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> PackConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return PackConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping at the root")

    build_config = _as_str(data.get("build_config")) or DEFAULT_BUILD_CONFIG
    dependencies_str = _as_str(data.get("dependencies_file"))
    log_file_str = _as_str(data.get("log_file"))

    return PackConfig(
        root=root,
        build_config=build_config,
        dependencies_file=root / dependencies_str if dependencies_str else None,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        log_file=root / log_file_str if log_file_str else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    if config_path.name != CONFIG_FILE_NAME:
        return (config_path.parent / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILE_NAME", "ConfigError", "PackConfig", "load_config"]

"""
Configuration file loading.

Loads ``config.yaml`` from the project directory, overlays ``config.{env}.yaml``
and resolves environment variable references.
"""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from feedwatch.config.resolver import resolve_config
from feedwatch.exceptions import ConfigurationError


class Config:
    """feedwatch configuration container with dict-like access."""

    def __init__(self, data: dict[str, Any]):
        self.data = data

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (``remote.host``)."""
        value: Any = self.data
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def section(self, key: str) -> dict[str, Any]:
        """Return a top-level section as a dict (empty when absent)."""
        value = self.data.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigurationError(
                f"Configuration '{key}' must be a mapping, got {type(value).__name__}",
                details={"key": key},
            )
        return value

    def __getitem__(self, key: str) -> Any:
        if "." in key:
            return self.get(key)
        if key in self.data:
            value = self.data[key]
            if isinstance(value, dict):
                return Config(value)
            return value
        raise KeyError(f"Config key '{key}' not found")

    def __contains__(self, key: str) -> bool:
        if "." in key:
            value: Any = self.data
            for k in key.split("."):
                if not isinstance(value, dict) or k not in value:
                    return False
                value = value[k]
            return True
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)


def load_config(project_path: Path | None = None, env: str | None = None) -> Config:
    """
    Load feedwatch configuration.

    Args:
        project_path: Path to project root (default: current directory)
        env: Environment name (dev, staging, prod)

    Returns:
        Config instance with merged configuration

    Raises:
        ConfigurationError: If the file is missing, unreadable or not valid YAML
    """
    if project_path is None:
        project_path = Path.cwd()

    base_config_path = Path(project_path) / "config.yaml"
    if not base_config_path.is_file():
        raise ConfigurationError(
            f"Configuration file not found: {base_config_path}\n"
            f"  Suggestion: Create a config.yaml file in your project root",
            details={"path": str(base_config_path)},
        )

    config_data = _read_yaml(base_config_path)

    if env:
        env_config_path = Path(project_path) / f"config.{env}.yaml"
        if env_config_path.exists():
            _merge_dict(config_data, _read_yaml(env_config_path))

    if not isinstance(config_data, dict):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(config_data).__name__}",
            details={"path": str(base_config_path)},
        )

    return Config(resolve_config(config_data, env or "dev"))


def _read_yaml(path: Path) -> Any:
    try:
        with open(path) as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" at line {mark.line + 1}, column {mark.column + 1}" if mark else ""
        raise ConfigurationError(
            f"Error parsing {path.name}{where}:\n"
            f"  {e}\n"
            f"  Suggestion: Check YAML syntax, ensure proper indentation and quotes",
            details={"path": str(path)},
        ) from e
    except PermissionError as e:
        raise ConfigurationError(f"Permission denied reading {path}", details={"path": str(path)}) from e


def _merge_dict(base: dict, override: dict) -> None:
    """Recursively merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value

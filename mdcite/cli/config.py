"""Configuration management for the CLI."""

import os
from pathlib import Path
from typing import Any

import yaml

from mdcite.exceptions import ConfigError
from mdcite.session import DEFAULT_BIBLIOGRAPHY

DEFAULTS: dict[str, Any] = {
    "bibliography_path": DEFAULT_BIBLIOGRAPHY,
    "in_parentheses": True,
}


class Config:
    """Configuration management for the CLI application."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ConfigError(f"Error reading config file: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def user_config_path() -> Path:
        """Path of the per-user configuration file."""
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        return xdg_config_home / "mdcite" / "config.yaml"

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        return [
            Config.user_config_path(),
            # Project config
            Path(".mdcite.yaml"),
            Path("mdcite.yaml"),
        ]

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def get_config_paths() -> list[Path]:
    """Get configuration paths in precedence order."""
    return Config.get_config_paths()


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Args:
        path: Explicit config file; replaces the default locations.
    """
    config = dict(DEFAULTS)

    paths = [path] if path else get_config_paths()

    # Load from all config paths (last one wins for conflicting keys)
    for config_path in paths:
        if config_path.exists():
            config = Config.merge_configs(config, Config.from_file(config_path))

    # Override with environment variables
    env_overrides = {}
    if bibliography := os.environ.get("MDCITE_BIBLIOGRAPHY"):
        env_overrides["bibliography_path"] = bibliography

    return Config.merge_configs(config, env_overrides)


def save_bibliography_path(value: str, path: Path | None = None) -> Path:
    """Persist a new explicit bibliography path.

    Other settings in the file are kept.

    Returns:
        The file that was written.
    """
    target = path or Config.user_config_path()

    existing = Config.from_file(target) if target.exists() else {}
    existing["bibliography_path"] = value

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w") as f:
            yaml.safe_dump(existing, f, default_flow_style=False, sort_keys=True)
    except OSError as e:
        raise ConfigError(f"Error writing config file: {e}")

    return target


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result

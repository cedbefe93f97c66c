"""
Runtime Configuration

Central configuration for tree construction, the CLI, and logging.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from ordmerkle.schemas.errors import ConfigurationException

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "ORDMERKLE_"

ITEM_FORMATS = ("lines", "jsonl")
OUTPUT_FORMATS = ("human", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (ORDMERKLE_* prefix, .env supported)
    - JSON or YAML file
    - Programmatic construction
    """
    hash_algorithm: str = "sha256"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    item_format: str = "lines"  # how the CLI reads item files
    output_format: str = "human"

    def __post_init__(self) -> None:
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationException(
                f"Unsupported log level: {self.log_level}",
                field_path="log_level",
            )
        if self.item_format not in ITEM_FORMATS:
            raise ConfigurationException(
                f"Unsupported item format: {self.item_format}",
                field_path="item_format",
            )
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigurationException(
                f"Unsupported output format: {self.output_format}",
                field_path="output_format",
            )

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - ORDMERKLE_HASH_ALGORITHM: Hash algorithm name (sha256, blake2b, crc32, ...)
        - ORDMERKLE_LOG_LEVEL: Log level
        - ORDMERKLE_LOG_FILE: Log file path
        - ORDMERKLE_ITEM_FORMAT: lines or jsonl
        - ORDMERKLE_OUTPUT_FORMAT: human or json
        """
        overrides: dict[str, Any] = {}
        for f in fields(RuntimeConfig):
            value = os.getenv(f"{ENV_PREFIX}{f.name.upper()}")
            if value:
                overrides[f.name] = value
        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON or YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            if path.suffix in (".yaml", ".yml"):
                import yaml
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Config file must contain a mapping, got {type(data).__name__}",
                details={"path": str(path)},
            )
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationException(
                f"Unknown configuration keys: {', '.join(unknown)}",
                details={"unknown": unknown},
            )
        return cls(**data)

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.items():
            setattr(new_config, key, value)
        new_config.__post_init__()
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hash_algorithm": self.hash_algorithm,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "item_format": self.item_format,
            "output_format": self.output_format,
        }


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. Without an explicit path,
    ./ordmerkle.json, ./.ordmerkle.json and ~/.config/ordmerkle/config.json
    are tried in order.
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        default_paths = [
            Path.cwd() / "ordmerkle.json",
            Path.cwd() / ".ordmerkle.json",
            Path.home() / ".config" / "ordmerkle" / "config.json",
        ]
        for default_path in default_paths:
            if default_path.exists():
                config = RuntimeConfig.from_file(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(RuntimeConfig().to_dict(), indent=2) + "\n"


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: Optional[RuntimeConfig]) -> None:
    """Set (or with None, reset) the default runtime configuration."""
    global _default_config
    _default_config = config

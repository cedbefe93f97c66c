"""
Runtime Configuration Module

Provides configuration loading and management.
"""

from .runtime import (
    RuntimeConfig,
    load_config,
    get_default_config,
    set_default_config,
    get_default_config_template,
)

__all__ = [
    "RuntimeConfig",
    "load_config",
    "get_default_config",
    "set_default_config",
    "get_default_config_template",
]

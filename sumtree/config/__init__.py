"""
Runtime Configuration Module

Provides configuration loading and management for tree construction.
"""

from .runtime import (
    HashConfig,
    LoggingConfig,
    RuntimeConfig,
    TreeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "HashConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "TreeConfig",
    "get_default_config",
    "set_default_config",
]

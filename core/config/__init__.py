"""
Runtime Configuration Module

Provides configuration loading and management for the escrow core.
"""

from .runtime import (
    ENV_PREFIX,
    LoggingConfig,
    RegistryConfig,
    RuntimeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ENV_PREFIX",
    "LoggingConfig",
    "RegistryConfig",
    "RuntimeConfig",
    "get_default_config",
    "set_default_config",
]

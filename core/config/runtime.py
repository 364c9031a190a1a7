"""
Runtime Configuration

Central configuration for building a registry and for CLI logging.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.escrow.registry import DEFAULT_REGISTRY_ADDRESS

load_dotenv()


ENV_PREFIX = "PRIZEPOOL_"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RegistryConfig:
    """Configuration for a CompetitionRegistry."""
    administrator: Optional[str] = None
    address: str = DEFAULT_REGISTRY_ADDRESS
    reentrancy_guard: bool = True


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (PRIZEPOOL_* prefix, .env supported)
    - YAML file
    - Programmatic construction
    """
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - PRIZEPOOL_ADMIN: Administrator identity
        - PRIZEPOOL_REGISTRY_ADDRESS: Registry account address
        - PRIZEPOOL_REENTRANCY_GUARD: Enable per-competition guard (true/false)
        - PRIZEPOOL_LOG_LEVEL: Log level
        - PRIZEPOOL_LOG_FILE: Log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}ADMIN"):
            overrides.setdefault("registry", {})["administrator"] = os.getenv(f"{ENV_PREFIX}ADMIN")
        if os.getenv(f"{ENV_PREFIX}REGISTRY_ADDRESS"):
            overrides.setdefault("registry", {})["address"] = os.getenv(f"{ENV_PREFIX}REGISTRY_ADDRESS")
        if os.getenv(f"{ENV_PREFIX}REENTRANCY_GUARD"):
            overrides.setdefault("registry", {})["reentrancy_guard"] = _env_flag(
                f"{ENV_PREFIX}REENTRANCY_GUARD", "true"
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        registry_data = data.get("registry", {}) or {}
        logging_data = data.get("logging", {}) or {}

        registry = RegistryConfig(**registry_data) if registry_data else RegistryConfig()
        log = LoggingConfig(**logging_data) if logging_data else LoggingConfig()

        return cls(
            registry=registry,
            logging=log,
            extra=data.get("extra", {}) or {},
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        Allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.get("registry", {}).items():
            setattr(new_config.registry, key, value)
        for key, value in overrides.get("logging", {}).items():
            setattr(new_config.logging, key, value)
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "registry": {
                "administrator": self.registry.administrator,
                "address": self.registry.address,
                "reentrancy_guard": self.registry.reentrancy_guard,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig | None) -> None:
    """Set (or clear, with None) the default runtime configuration."""
    global _default_config
    _default_config = config

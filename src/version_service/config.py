"""
Configuration management for Version Service.

Supports configuration via YAML files, environment variables, and command-line flags.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATHS = [
    Path("/etc/version-service/config.yaml"),
    Path.home() / ".config" / "version-service" / "config.yaml",
]

# YAML section name -> field name prefix
SECTION_PREFIXES = {
    "redis": "redis",
    "release": "release",
    "otp": "otp",
    "nvmem": "nvmem",
    "logging": "log",
}


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""

    pass


@dataclass
class Config:
    """
    Configuration container for Version Service.

    Priority (highest to lowest):
    1. Command-line flags (applied by the CLI)
    2. Environment variables (prefixed with VERSION_SERVICE_)
    3. Config file values
    4. Default values
    """

    # Store settings
    redis_addr: str = "192.168.7.1:6379"
    redis_hash: str = "os-release"
    redis_timeout: float | None = None

    # Input sources
    release_path: str = "/etc/os-release"
    otp_cfg0_path: str = "/sys/fsl_otp/HW_OCOTP_CFG0"
    otp_cfg1_path: str = "/sys/fsl_otp/HW_OCOTP_CFG1"
    nvmem_path: str = "/sys/bus/nvmem/devices/imx-ocotp0/nvmem"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create config from a dictionary."""
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}

        # Flatten nested sections: {"redis": {"addr": ...}} -> {"redis_addr": ...}
        flat: dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, dict):
                prefix = SECTION_PREFIXES.get(key, key)
                for subkey, subvalue in value.items():
                    name = f"{prefix}_{subkey}"
                    flat[name if name in known_fields else subkey] = subvalue
            else:
                flat[key] = value

        filtered = {k: v for k, v in flat.items() if k in known_fields}

        return cls(**filtered)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """
        Load configuration with full resolution order.

        Args:
            config_path: Explicit path to config file. If None, searches
                        default locations.

        Returns:
            Config with file values and environment overrides applied.
        """
        base_config: dict[str, Any] = {}

        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    base_config = yaml.safe_load(f) or {}
        else:
            for path in DEFAULT_CONFIG_PATHS:
                if path.exists():
                    with open(path) as f:
                        base_config = yaml.safe_load(f) or {}
                    break

        config = cls.from_dict(base_config) if base_config else cls()

        config._apply_env_overrides()

        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            "VERSION_SERVICE_REDIS_ADDR": "redis_addr",
            "VERSION_SERVICE_REDIS_HASH": "redis_hash",
            "VERSION_SERVICE_REDIS_TIMEOUT": "redis_timeout",
            "VERSION_SERVICE_RELEASE_PATH": "release_path",
            "VERSION_SERVICE_OTP_CFG0_PATH": "otp_cfg0_path",
            "VERSION_SERVICE_OTP_CFG1_PATH": "otp_cfg1_path",
            "VERSION_SERVICE_NVMEM_PATH": "nvmem_path",
            "VERSION_SERVICE_LOG_LEVEL": "log_level",
        }

        for env_var, attr in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                # Type coercion
                if attr == "redis_timeout":
                    try:
                        setattr(self, attr, float(value) if value else None)
                    except ValueError:
                        raise ConfigError(
                            f"{env_var} must be a number of seconds, got '{value}'"
                        ) from None
                else:
                    setattr(self, attr, value)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "redis": {
                "addr": self.redis_addr,
                "hash": self.redis_hash,
                "timeout": self.redis_timeout,
            },
            "release": {
                "path": self.release_path,
            },
            "otp": {
                "cfg0_path": self.otp_cfg0_path,
                "cfg1_path": self.otp_cfg1_path,
            },
            "nvmem": {
                "path": self.nvmem_path,
            },
            "logging": {
                "level": self.log_level,
            },
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

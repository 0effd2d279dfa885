"""
================================================================================
Configuration Loader
================================================================================

YAML-based client configuration with environment variable override support.

Features:
    - One YAML file per process (singleton)
    - Environment variable override (CLIENT_BASE_URL overrides client.base_url)
    - Dot notation path access with defaults
    - Config file location override via RESTACTOR_CONFIG

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from ..exceptions import ConfigurationError


# Default configuration file path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

# Environment variable naming an alternative configuration file
CONFIG_PATH_ENV = "RESTACTOR_CONFIG"


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (CLIENT_BASE_URL)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("client.base_url", "http://localhost:8080")
        'https://api.example.com'

        >>> config.get("client.rate_limit")
        None

    Environment Variable Mapping:
        - client.base_url -> CLIENT_BASE_URL
        - client.read_timeout -> CLIENT_READ_TIMEOUT
        - auth.basic.user -> AUTH_BASIC_USER
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Args:
            config_path: Path to the YAML configuration file. Falls back to
                         $RESTACTOR_CONFIG, then DEFAULT_CONFIG_PATH.
        """
        if getattr(self, "_initialized", False):
            return

        env_path = os.environ.get(CONFIG_PATH_ENV)
        self._config_path = Path(config_path or env_path or DEFAULT_CONFIG_PATH)
        self._load_config()
        self._initialized = True

    @property
    def config_path(self) -> Path:
        return self._config_path

    def _load_config(self) -> None:
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self._config_path}"
            )
        self._config = loaded
        logger.debug(f"Loaded configuration from: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Environment variables win over the YAML file, which wins over
        ``default``. Environment values are converted to the type of
        ``default`` when one is given.

        Examples:
            >>> config.get("client.connect_timeout", 10.0)
            10.0
        """
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        value: Any = self._config
        for part in key.split("."):
            value = value.get(part) if isinstance(value, dict) else None
            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Return a whole top-level section, or an empty dict."""
        value = self._config.get(section, {})
        return value if isinstance(value, dict) else {}

    def reload(self) -> None:
        """Re-read the configuration file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """Convert an environment string to the type of ``reference``."""
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next instance reads its file again."""
        cls._instance = None
        cls._config = {}


__all__ = [
    "ConfigLoader",
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
]

#!/usr/bin/env python3
"""
Configuration Manager for the Docker image cleaner

This module handles loading and managing configuration from config.yaml
and environment variables, and defines the retention filters that drive
image selection.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""


@dataclass(frozen=True)
class RetentionFilters:
    """Retention rules for one cleanup run.

    keep_count of 0 and keep_since/name_pattern of None mean the filter is
    disabled. force only changes how deletions are issued, not which images
    are selected.
    """

    keep_count: int = 0
    keep_since: Optional[str] = None
    name_pattern: Optional[str] = None
    force: bool = False

    def __post_init__(self):
        if not isinstance(self.keep_count, int) or isinstance(self.keep_count, bool):
            raise ConfigValidationError(
                f"keep_count must be an integer, got: {self.keep_count} (type: {type(self.keep_count).__name__})"
            )
        if self.keep_count < 0:
            raise ConfigValidationError(f"keep_count must be a non-negative integer, got: {self.keep_count}")

    @property
    def trim_by_count(self) -> bool:
        return self.keep_count != 0

    @property
    def trim_by_time(self) -> bool:
        return self.keep_since is not None

    @property
    def trim_by_name(self) -> bool:
        return self.name_pattern is not None

    @property
    def is_active(self) -> bool:
        """True when any filter is set, i.e. a targeted cleanup instead of a prune"""
        return self.trim_by_count or self.trim_by_time or self.trim_by_name


class ConfigManager:
    """Manages configuration for the Docker image cleaner"""

    def __init__(self, config_file: str = None, validate: bool = True):
        """Initialize ConfigManager

        Args:
            config_file: Path to configuration YAML file (defaults to config.yaml or CONFIG_FILE env var)
            validate: If True, validate configuration on initialization
        """
        if config_file is None:
            config_file = os.environ.get("CONFIG_FILE", "config.yaml")
        self.config_file = config_file
        self.config = self._load_config()

        if validate:
            self.validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file with defaults"""
        default_config = {
            "docker": {"base_url": None, "timeout": 60},
            "output": {"color": True},
            "logging": {"level": "INFO"},
        }

        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r") as f:
                    user_config = yaml.safe_load(f) or {}
                return self._merge_config(default_config, user_config)
            else:
                logging.debug(f"Config file {self.config_file} not found, using defaults")
                return default_config
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Error loading config file: {e}")
            return default_config

    def _merge_config(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user config with defaults"""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    # Docker daemon configuration
    def get_docker_base_url(self) -> Optional[str]:
        """Get daemon URL from config. None means docker.from_env(), which reads
        DOCKER_HOST together with DOCKER_TLS_VERIFY and DOCKER_CERT_PATH.
        """
        return self.config["docker"].get("base_url")

    def get_docker_timeout(self) -> int:
        """Get daemon API timeout in seconds, with type coercion"""
        timeout = os.environ.get("DOCKER_TIMEOUT") or self.config["docker"].get("timeout", 60)
        try:
            return int(timeout)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"docker.timeout must be an integer, got: {timeout} (type: {type(timeout).__name__})"
            )

    # Output configuration
    def is_color_enabled(self) -> bool:
        """Colored status lines, disabled by the NO_COLOR convention"""
        if os.environ.get("NO_COLOR"):
            return False
        return bool(self.config.get("output", {}).get("color", True))

    def get_log_level(self) -> str:
        """Get log level name from environment or config"""
        return (os.environ.get("LOG_LEVEL") or self.config.get("logging", {}).get("level", "INFO")).upper()

    def validate_config(self) -> None:
        """Validate configuration values

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        errors = []
        warnings = []

        base_url = self.get_docker_base_url()
        if base_url is not None and not self._is_valid_base_url(base_url):
            errors.append(
                f"Docker base URL '{base_url}' is invalid (expected unix://, npipe://, tcp://, http:// or https://)"
            )

        try:
            timeout = self.get_docker_timeout()
        except ConfigValidationError as e:
            errors.append(str(e))
        else:
            if timeout < 1:
                errors.append(f"docker.timeout must be a positive integer (seconds), got: {timeout}")
            elif timeout > 3600:
                warnings.append(f"docker.timeout is very high ({timeout}s), a hung daemon will block for a long time")

        level = self.get_log_level()
        if not isinstance(logging.getLevelName(level), int):
            errors.append(f"logging.level '{level}' is not a valid log level")

        for warning in warnings:
            logging.warning(f"Configuration warning: {warning}")

        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            logging.error(error_msg)
            raise ConfigValidationError(error_msg)

    def _is_valid_base_url(self, url: str) -> bool:
        """Validate daemon URL format"""
        if not url:
            return False
        pattern = r"^(unix|npipe|tcp|http|https|ssh)://\S+$"
        return bool(re.match(pattern, url))

    def print_config(self):
        """Print current configuration"""
        print("Current Configuration:")
        print(f"  Config File: {self.config_file}")
        print(f"  Docker Base URL: {self.get_docker_base_url() or 'from environment'}")
        print(f"  Docker Timeout: {self.get_docker_timeout()}")
        print(f"  Colored Output: {self.is_color_enabled()}")
        print(f"  Log Level: {self.get_log_level()}")


_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Return the shared ConfigManager, building it on first use.

    Validation can be disabled by setting SKIP_CONFIG_VALIDATION=true environment variable.
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(
            validate=os.environ.get("SKIP_CONFIG_VALIDATION", "").lower() not in ("true", "1", "yes")
        )
    return _config_manager

"""
Settings Configuration Service for EduMorph

This module provides centralized configuration management using properties files.
It handles loading, parsing, and providing access to application settings.

Configuration files:
- env.properties: Production configuration (default)
- env-test.properties: Test configuration (used when EDUMORPH_TEST_MODE=1)
"""

import os
import configparser
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Union


def get_config_file_path() -> str:
    """
    Determine the appropriate configuration file based on environment.

    Priority:
    1. EDUMORPH_CONFIG_FILE environment variable (explicit override)
    2. env-test.properties (when EDUMORPH_TEST_MODE=1)
    3. env.properties (production default)
    """
    explicit_config = os.environ.get("EDUMORPH_CONFIG_FILE")
    if explicit_config:
        return explicit_config

    search_paths = [
        Path.cwd(),
        Path(__file__).parent.parent.parent.parent.parent,  # project root
    ]

    for base_path in search_paths:
        if os.environ.get("EDUMORPH_TEST_MODE") == "1":
            test_config = base_path / "env-test.properties"
            if test_config.exists():
                return str(test_config)

        prod_config = base_path / "env.properties"
        if prod_config.exists():
            return str(prod_config)

    return "env.properties"


class SettingsConfigService:
    """Service for managing application settings from properties files."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize the settings configuration service.

        Args:
            config_file: Optional path to config file. If None, auto-detects based on environment.
        """
        self.config_file = config_file or get_config_file_path()
        self.config = configparser.ConfigParser()
        self.logger = logging.getLogger(__name__)
        self._load_config()

    def _load_config(self):
        """Load configuration from properties file."""
        if not os.path.exists(self.config_file):
            self.logger.warning(
                f"Config file {self.config_file} not found, using defaults"
            )
            self._create_default_config()
            return

        try:
            self.config.read(self.config_file, encoding="utf-8")
            self.logger.info(f"Configuration loaded from {self.config_file}")
        except configparser.Error as e:
            self.logger.error(f"Failed to load configuration: {e}")
            self.config = configparser.ConfigParser()
            self._create_default_config()

    def _create_default_config(self):
        """Create default configuration if file doesn't exist."""
        self.config.add_section("database")
        self.config.set("database", "path", "edumorph.db")
        self.config.set("database", "echo", "false")

        self.config.add_section("logging")
        self.config.set("logging", "default_level", "INFO")
        self.config.set("logging", "log_dir", "logs")
        self.config.set("logging", "max_file_size_mb", "10")

        self.config.add_section("security")
        self.config.set("security", "password_min_length", "8")
        self.config.set("security", "token_expiry_minutes", "30")

        self.config.add_section("matchmaking")
        self.config.set("matchmaking", "min_score", "60")
        self.config.set("matchmaking", "max_results", "5")

        self.config.add_section("privacy")
        self.config.set("privacy", "progress_history_days", "365")
        self.config.set("privacy", "activity_logs_days", "90")
        self.config.set("privacy", "sensitive_fields", "email,displayName")

        self.save_config()

    def save_config(self):
        """Save current configuration to file."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                self.config.write(f)
            self.logger.info(f"Configuration saved to {self.config_file}")
        except OSError as e:
            self.logger.error(f"Failed to save configuration: {e}")

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> str:
        """Get a configuration value."""
        try:
            return self.config.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            if fallback is not None:
                return fallback
            self.logger.warning(f"Configuration not found: {section}.{key}")
            return ""

    def getint(self, section: str, key: str, fallback: Optional[int] = None) -> int:
        """Get an integer configuration value."""
        try:
            return self.config.getint(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            if fallback is not None:
                return fallback
            self.logger.warning(f"Integer configuration not found: {section}.{key}")
            return 0

    def getfloat(
        self, section: str, key: str, fallback: Optional[float] = None
    ) -> float:
        """Get a float configuration value."""
        try:
            return self.config.getfloat(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            if fallback is not None:
                return fallback
            self.logger.warning(f"Float configuration not found: {section}.{key}")
            return 0.0

    def getboolean(
        self, section: str, key: str, fallback: Optional[bool] = None
    ) -> bool:
        """Get a boolean configuration value."""
        try:
            return self.config.getboolean(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            if fallback is not None:
                return fallback
            self.logger.warning(f"Boolean configuration not found: {section}.{key}")
            return False

    def get_list(self, section: str, key: str, fallback: Optional[list] = None) -> list:
        """Get a list configuration value (comma-separated)."""
        value = self.get(section, key, "")
        if value:
            return [item.strip() for item in value.split(",") if item.strip()]
        return fallback or []

    def set(self, section: str, key: str, value: Union[str, int, float, bool]):
        """Set a configuration value."""
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, key, str(value))

    def get_matchmaking_defaults(self) -> Dict[str, Any]:
        """Get matchmaking thresholds."""
        return {
            "min_score": self.getint("matchmaking", "min_score", 60),
            "max_results": self.getint("matchmaking", "max_results", 5),
        }

    def get_privacy_defaults(self) -> Dict[str, Any]:
        """Get default privacy retention windows and encrypted fields."""
        return {
            "progress_history_days": self.getint(
                "privacy", "progress_history_days", 365
            ),
            "activity_logs_days": self.getint("privacy", "activity_logs_days", 90),
            "sensitive_fields": self.get_list(
                "privacy", "sensitive_fields", ["email", "displayName"]
            ),
        }


# Global instance
_settings_service = None


def get_settings_service(config_file: Optional[str] = None) -> SettingsConfigService:
    """
    Get the global settings service instance.

    Args:
        config_file: Optional path to config file. If None, auto-detects:
                    - EDUMORPH_CONFIG_FILE when set
                    - env-test.properties when EDUMORPH_TEST_MODE=1
                    - env.properties for production

    Returns:
        SettingsConfigService instance
    """
    global _settings_service
    if _settings_service is None:
        _settings_service = SettingsConfigService(config_file)
    return _settings_service


def reset_settings_service():
    """Reset the global settings service instance. Useful for testing."""
    global _settings_service
    _settings_service = None

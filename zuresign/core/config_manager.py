"""
Configuration management for ZureSign.

Handles loading, validation, and access to signing and logging settings.
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from zuresign.auth.exceptions import ConfigurationError
from zuresign.models import SigningOptions

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Supported log output formats."""
    TEXT = "text"
    JSON = "json"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.TEXT
    file: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class ZureSignConfig(BaseModel):
    """Main ZureSign configuration schema."""

    account: SigningOptions = Field(default_factory=SigningOptions)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """
    Extract account options from a storage connection string.

    Example:
        >>> parse_connection_string("AccountName=myaccount;AccountKey=a2V5")
        {'account_name': 'myaccount', 'account_key': 'a2V5'}

    Raises:
        ConfigurationError: If a segment is not a key=value pair
    """
    fields: Dict[str, str] = {}

    for segment in connection_string.strip().strip(";").split(";"):
        if not segment:
            continue
        if "=" not in segment:
            raise ConfigurationError(f"Invalid connection string segment: {segment!r}")
        # Account keys end in '=' padding, so split on the first '=' only
        name, value = segment.split("=", 1)
        fields[name.strip().lower()] = value.strip()

    options: Dict[str, str] = {}
    if "accountname" in fields:
        options["account_name"] = fields["accountname"]
    if "accountkey" in fields:
        options["account_key"] = fields["accountkey"]
    return options


class ConfigManager:
    """
    Manages ZureSign configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables (ZURESIGN_*, then AZURE_STORAGE_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[ZureSignConfig] = None
        self._config_file: Optional[Path] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> ZureSignConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            cli_overrides: Dictionary of CLI argument overrides

        Returns:
            Validated ZureSignConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            self._config_file = Path(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.debug(f"Applied {len(env_config)} environment variable overrides")

        if cli_overrides:
            config_dict = self._merge_configs(config_dict, cli_overrides)
            logger.debug(f"Applied {len(cli_overrides)} CLI argument overrides")

        try:
            self._config = ZureSignConfig(**config_dict)
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        self._log_configuration()
        return self._config

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ConfigurationError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}
        account: Dict[str, Any] = {}

        # Azure tooling conventions, lowest precedence
        if connection_string := os.getenv("AZURE_STORAGE_CONNECTION_STRING"):
            account.update(parse_connection_string(connection_string))
        if account_name := os.getenv("AZURE_STORAGE_ACCOUNT"):
            account["account_name"] = account_name
        if account_key := os.getenv("AZURE_STORAGE_KEY"):
            account["account_key"] = account_key

        if connection_string := os.getenv("ZURESIGN_CONNECTION_STRING"):
            account.update(parse_connection_string(connection_string))
        if account_name := os.getenv("ZURESIGN_ACCOUNT_NAME"):
            account["account_name"] = account_name
        if account_key := os.getenv("ZURESIGN_ACCOUNT_KEY"):
            account["account_key"] = account_key
        if ms_version := os.getenv("ZURESIGN_MS_VERSION"):
            account["ms_version"] = ms_version
        if ms_date := os.getenv("ZURESIGN_MS_DATE"):
            account["ms_date"] = ms_date

        if account:
            config["account"] = account

        if log_level := os.getenv("ZURESIGN_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_format := os.getenv("ZURESIGN_LOG_FORMAT"):
            config.setdefault("logging", {})["format"] = log_format.lower()
        if log_file := os.getenv("ZURESIGN_LOG_FILE"):
            config.setdefault("logging", {})["file"] = log_file

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _log_configuration(self) -> None:
        """Log the loaded configuration with the account key redacted."""
        if not self._config:
            return

        config_dict = self._config.model_dump(mode="json")

        if config_dict["account"].get("account_key"):
            config_dict["account"]["account_key"] = "***REDACTED***"

        logger.debug(f"Active configuration: {json.dumps(config_dict, indent=2)}")

    def get_config(self) -> ZureSignConfig:
        """
        Get the loaded configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def reload(self) -> ZureSignConfig:
        """Reload configuration from the same sources."""
        config_file = str(self._config_file) if self._config_file else None
        return self.load(config_file=config_file)

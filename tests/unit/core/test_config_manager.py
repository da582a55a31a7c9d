"""
Tests for ConfigManager.
"""

import json

import pytest
import yaml

from zuresign.auth.exceptions import ConfigurationError
from zuresign.core.config_manager import (
    ConfigManager,
    LogFormat,
    LogLevel,
    ZureSignConfig,
    parse_connection_string,
)

ENV_VARS = [
    "AZURE_STORAGE_CONNECTION_STRING",
    "AZURE_STORAGE_ACCOUNT",
    "AZURE_STORAGE_KEY",
    "ZURESIGN_CONNECTION_STRING",
    "ZURESIGN_ACCOUNT_NAME",
    "ZURESIGN_ACCOUNT_KEY",
    "ZURESIGN_MS_VERSION",
    "ZURESIGN_MS_DATE",
    "ZURESIGN_LOG_LEVEL",
    "ZURESIGN_LOG_FORMAT",
    "ZURESIGN_LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfigManager:
    """Test suite for ConfigManager."""

    def test_load_defaults(self):
        """Test loading default configuration."""
        config = ConfigManager().load()

        assert config.account.account_name is None
        assert config.account.account_key is None
        assert config.account.ms_version == "2023-11-03"
        assert config.logging.level == LogLevel.WARNING
        assert config.logging.format == LogFormat.TEXT

    def test_load_from_yaml_file(self, tmp_path):
        """Test loading configuration from YAML file."""
        config_file = tmp_path / "zuresign.yaml"
        config_file.write_text(yaml.dump({
            "account": {
                "account_name": "myaccount",
                "account_key": "a2V5",
                "ms_version": "2015-02-21",
            },
            "logging": {"level": "DEBUG"},
        }))

        config = ConfigManager().load(config_file=str(config_file))

        assert config.account.account_name == "myaccount"
        assert config.account.account_key == "a2V5"
        assert config.account.ms_version == "2015-02-21"
        assert config.logging.level == LogLevel.DEBUG

    def test_load_from_json_file(self, tmp_path):
        """Test loading configuration from JSON file."""
        config_file = tmp_path / "zuresign.json"
        config_file.write_text(json.dumps({"account": {"account_name": "jsonaccount"}}))

        config = ConfigManager().load(config_file=str(config_file))

        assert config.account.account_name == "jsonaccount"

    def test_empty_yaml_file(self, tmp_path):
        """Test that an empty YAML file yields defaults."""
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")

        config = ConfigManager().load(config_file=str(config_file))

        assert config == ZureSignConfig()

    def test_missing_file(self):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(config_file="/nonexistent/zuresign.yaml")

    def test_unsupported_format(self, tmp_path):
        """Test that unknown file formats are rejected."""
        config_file = tmp_path / "zuresign.toml"
        config_file.write_text("account = {}")

        with pytest.raises(ConfigurationError, match="Unsupported"):
            ConfigManager().load(config_file=str(config_file))

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test that environment variables override file values."""
        config_file = tmp_path / "zuresign.yaml"
        config_file.write_text(yaml.dump({"account": {"account_name": "fileaccount", "account_key": "a2V5"}}))
        monkeypatch.setenv("ZURESIGN_ACCOUNT_NAME", "envaccount")
        monkeypatch.setenv("ZURESIGN_LOG_LEVEL", "info")

        config = ConfigManager().load(config_file=str(config_file))

        assert config.account.account_name == "envaccount"
        assert config.account.account_key == "a2V5"
        assert config.logging.level == LogLevel.INFO

    def test_azure_env_vars(self, monkeypatch):
        """Test the Azure tooling environment variables."""
        monkeypatch.setenv("AZURE_STORAGE_ACCOUNT", "azaccount")
        monkeypatch.setenv("AZURE_STORAGE_KEY", "YXprZXk=")

        config = ConfigManager().load()

        assert config.account.account_name == "azaccount"
        assert config.account.account_key == "YXprZXk="

    def test_zuresign_env_beats_azure_env(self, monkeypatch):
        """Test that ZURESIGN_* variables take precedence."""
        monkeypatch.setenv("AZURE_STORAGE_ACCOUNT", "azaccount")
        monkeypatch.setenv("ZURESIGN_ACCOUNT_NAME", "zsaccount")

        config = ConfigManager().load()

        assert config.account.account_name == "zsaccount"

    def test_connection_string_env(self, monkeypatch):
        """Test loading credentials from a connection string."""
        monkeypatch.setenv(
            "AZURE_STORAGE_CONNECTION_STRING",
            "DefaultEndpointsProtocol=https;AccountName=csaccount;AccountKey=Y3NrZXk=;EndpointSuffix=core.windows.net",
        )

        config = ConfigManager().load()

        assert config.account.account_name == "csaccount"
        assert config.account.account_key == "Y3NrZXk="

    def test_cli_overrides_env(self, monkeypatch):
        """Test that CLI overrides win over environment variables."""
        monkeypatch.setenv("ZURESIGN_ACCOUNT_NAME", "envaccount")
        monkeypatch.setenv("ZURESIGN_MS_VERSION", "2015-02-21")

        config = ConfigManager().load(cli_overrides={"account": {"account_name": "cliaccount"}})

        assert config.account.account_name == "cliaccount"
        assert config.account.ms_version == "2015-02-21"

    def test_invalid_option(self):
        """Test that unknown account options are configuration errors."""
        with pytest.raises(ConfigurationError):
            ConfigManager().load(cli_overrides={"account": {"region": "westeurope"}})

    def test_invalid_ms_date(self, monkeypatch):
        """Test that an invalid date is a configuration error."""
        monkeypatch.setenv("ZURESIGN_MS_DATE", "yesterday")

        with pytest.raises(ConfigurationError):
            ConfigManager().load()

    def test_invalid_log_level(self):
        """Test that an unknown log level is rejected."""
        with pytest.raises(ConfigurationError):
            ConfigManager().load(cli_overrides={"logging": {"level": "LOUD"}})

    def test_get_config_before_load(self):
        """Test that get_config requires load first."""
        with pytest.raises(RuntimeError):
            ConfigManager().get_config()

    def test_get_config_and_reload(self, tmp_path):
        """Test accessing and reloading configuration."""
        config_file = tmp_path / "zuresign.yaml"
        config_file.write_text(yaml.dump({"account": {"account_name": "first"}}))
        manager = ConfigManager()
        manager.load(config_file=str(config_file))

        assert manager.get_config().account.account_name == "first"

        config_file.write_text(yaml.dump({"account": {"account_name": "second"}}))

        assert manager.reload().account.account_name == "second"

    def test_key_redacted_in_log(self, caplog):
        """Test that the active configuration log hides the key."""
        caplog.set_level("DEBUG", logger="zuresign.core.config_manager")

        ConfigManager().load(cli_overrides={"account": {"account_name": "myaccount", "account_key": "c2VjcmV0"}})

        assert "c2VjcmV0" not in caplog.text
        assert "***REDACTED***" in caplog.text


class TestConnectionString:
    """Test connection string parsing."""

    def test_parse(self):
        """Test extracting account name and key."""
        options = parse_connection_string("AccountName=myaccount;AccountKey=a2V5a2V5a2V5==")

        assert options == {"account_name": "myaccount", "account_key": "a2V5a2V5a2V5=="}

    def test_parse_ignores_other_fields(self):
        """Test that endpoint fields are ignored."""
        options = parse_connection_string("DefaultEndpointsProtocol=https;AccountName=myaccount;")

        assert options == {"account_name": "myaccount"}

    def test_parse_invalid_segment(self):
        """Test that segments without '=' are rejected."""
        with pytest.raises(ConfigurationError):
            parse_connection_string("AccountName=myaccount;garbage")

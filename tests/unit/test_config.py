"""Unit tests for configuration management."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from abtest_admin.config import ConfigManager, Settings
from abtest_admin.config.settings import ApiSettings, StorageSettings, WizardSettings
from abtest_admin.core.exceptions import ConfigurationError


class TestSettings:
    """Test Settings configuration model."""

    def test_default_settings_creation(self):
        """Test creating settings with defaults."""
        settings = Settings()
        assert settings.app_name == "abtest-admin"
        assert settings.version == "0.1.0"
        assert settings.debug is False
        assert settings.api.base_url == "http://localhost:5000"
        assert settings.api.token is None
        assert settings.storage.echo is False
        assert settings.wizard.small_audience_threshold == 20

    def test_custom_api_settings(self):
        """Test custom API settings."""
        api_settings = ApiSettings(base_url="https://admin.example.org", token="abc", timeout=5)

        assert api_settings.base_url == "https://admin.example.org"
        assert api_settings.token == "abc"
        assert api_settings.timeout == 5

    def test_wizard_settings(self):
        """Test wizard bounds."""
        wizard = WizardSettings()
        assert wizard.min_traffic_allocation == 10
        assert wizard.max_traffic_allocation == 100
        assert wizard.traffic_step == 10
        assert wizard.total_combinations == 20

    @patch.dict(os.environ, {
        "ABTEST_API_BASE_URL": "https://api.example.org",
        "ABTEST_API_TOKEN": "env_token",
        "WIZARD_SMALL_AUDIENCE_THRESHOLD": "30",
        "WIZARD_TOTAL_COMBINATIONS": "24",
        "DEBUG": "true",
    })
    def test_settings_from_env(self):
        """Test loading settings from environment variables."""
        settings = Settings()
        assert settings.api.base_url == "https://api.example.org"
        assert settings.api.token == "env_token"
        assert settings.wizard.small_audience_threshold == 30
        assert settings.wizard.total_combinations == 24
        assert settings.debug is True

    def test_get_data_directory_debug(self):
        """Test data directory in debug mode."""
        settings = Settings(debug=True)
        assert settings.get_data_directory() == Path.cwd() / "data"

    def test_get_data_directory_production(self):
        """Test data directory in production mode."""
        settings = Settings(debug=False)
        assert ".abtest_admin" in str(settings.get_data_directory())

    def test_get_log_directory(self):
        """Test log directory path."""
        assert "logs" in str(Settings().get_log_directory())

    def test_get_database_path_with_custom(self):
        """Test database path with custom path."""
        settings = Settings(storage=StorageSettings(path="/custom/preview.db"))
        assert str(settings.get_database_path()) == "/custom/preview.db"

    def test_get_database_url(self):
        """Test async database URL."""
        assert Settings().get_database_url().startswith("sqlite+aiosqlite:///")
        assert Settings().get_database_url().endswith("preview.db")

        settings = Settings(storage=StorageSettings(url="sqlite+aiosqlite:///:memory:"))
        assert settings.get_database_url() == "sqlite+aiosqlite:///:memory:"

    def test_settings_to_from_file_yaml(self):
        """Test saving and loading settings from YAML file."""
        with tempfile.TemporaryDirectory() as temp_dir:
            yaml_file = Path(temp_dir) / "config.yaml"

            original_settings = Settings(
                debug=True,
                api=ApiSettings(token="test_token"),
            )
            original_settings.to_file(str(yaml_file))

            loaded_settings = Settings.from_file(str(yaml_file))

            assert loaded_settings.debug is True
            assert loaded_settings.api.token == "test_token"

    def test_settings_to_from_file_json(self):
        """Test saving and loading settings from JSON file."""
        with tempfile.TemporaryDirectory() as temp_dir:
            json_file = Path(temp_dir) / "config.json"

            Settings(wizard=WizardSettings(traffic_step=5)).to_file(str(json_file))
            loaded_settings = Settings.from_file(str(json_file))

            assert loaded_settings.wizard.traffic_step == 5

    def test_settings_invalid_file_format(self):
        """Test loading settings from unsupported file format."""
        with tempfile.TemporaryDirectory() as temp_dir:
            txt_file = Path(temp_dir) / "config.txt"
            txt_file.write_text("invalid format")

            with pytest.raises(ValueError, match="Unsupported configuration file format"):
                Settings.from_file(str(txt_file))

    def test_settings_missing_file(self):
        """Test loading settings from non-existent file."""
        with pytest.raises(FileNotFoundError):
            Settings.from_file("non_existent.yaml")


class TestConfigManager:
    """Test ConfigManager implementation."""

    def test_config_manager_with_custom_settings(self):
        """Test creating a config manager with settings."""
        settings = Settings(debug=True)
        config = ConfigManager(settings)
        assert config.settings is settings

    def test_get_nested_config(self):
        """Test getting nested values."""
        config = ConfigManager()
        assert config.get("api.timeout") == 15.0
        assert config.get("wizard.traffic_step") == 10

    def test_get_nonexistent_config(self):
        """Test getting a missing key."""
        config = ConfigManager()
        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "default") == "default"

    def test_set_config_value(self):
        """Test setting values."""
        config = ConfigManager()
        config.set("debug", True)
        config.set("api.base_url", "https://staging.example.org")

        assert config.get("debug") is True
        assert config.settings.api.base_url == "https://staging.example.org"

    def test_has_config_key(self):
        """Test key existence checks."""
        config = ConfigManager()
        assert config.has("api.token") is True
        assert config.has("api.missing") is False

    def test_get_section(self):
        """Test getting a section."""
        config = ConfigManager()
        assert config.get_section("wizard")["small_audience_threshold"] == 20

    def test_set_section(self):
        """Test replacing a section."""
        config = ConfigManager()
        config.set_section("logging", {"level": "DEBUG", "json_format": True})
        assert config.settings.logging.level == "DEBUG"
        assert config.settings.logging.json_format is True

    def test_update_from_dict(self):
        """Test updating from a dictionary."""
        config = ConfigManager()
        config.update_from_dict({"debug": True, "app_name": "staging-admin"})
        assert config.get("debug") is True
        assert config.get("app_name") == "staging-admin"

    def test_validate_config_valid(self):
        """Test configuration validation with valid config."""
        assert ConfigManager().validate_config() == []

    def test_validate_config_errors(self):
        """Test configuration validation with invalid values."""
        config = ConfigManager(Settings(
            api=ApiSettings(base_url="ftp://backend", timeout=0),
            wizard=WizardSettings(
                min_traffic_allocation=60, max_traffic_allocation=50, traffic_step=0, total_combinations=0
            ),
        ))

        errors = config.validate_config()

        assert len(errors) == 5
        assert any("total combinations" in error for error in errors)
        assert any("base URL" in error for error in errors)
        assert any("timeout" in error for error in errors)

    def test_create_default_config(self, tmp_path):
        """Test writing the default configuration."""
        path = tmp_path / "abtest.yaml"
        ConfigManager().create_default_config(str(path))

        loaded = Settings.from_file(str(path))
        assert loaded.app_name == "abtest-admin"

    def test_ensure_directories_exist(self, tmp_path):
        """Test ensuring directories exist."""
        config = ConfigManager(Settings(debug=True))

        config.ensure_directories_exist()

        assert (tmp_path / "data" / "logs").exists()

    def test_load_from_missing_file(self):
        """Test loading a missing file through the manager."""
        config = ConfigManager()
        with pytest.raises(ConfigurationError, match="Cannot load configuration"):
            config.load_from_file("missing.yaml")

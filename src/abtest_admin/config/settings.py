"""Pydantic settings model for application configuration."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Settings for the REST backend the admin talks to."""

    model_config = SettingsConfigDict(env_prefix="ABTEST_API_")

    base_url: str = "http://localhost:5000"
    token: Optional[str] = None
    timeout: float = 15.0


class StorageSettings(BaseSettings):
    """Settings for the preview session database."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: Optional[str] = None
    path: Optional[str] = None
    echo: bool = False


class LoggingSettings(BaseSettings):
    """Settings for logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    file_path: Optional[str] = None
    json_format: bool = False


class WizardSettings(BaseSettings):
    """Bounds used by the test creation wizard."""

    model_config = SettingsConfigDict(env_prefix="WIZARD_")

    min_traffic_allocation: int = 10
    max_traffic_allocation: int = 100
    traffic_step: int = 10
    small_audience_threshold: int = 20
    total_combinations: int = 20


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application info
    app_name: str = "abtest-admin"
    version: str = "0.1.0"
    debug: bool = False

    # Component settings
    api: ApiSettings = Field(default_factory=ApiSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    wizard: WizardSettings = Field(default_factory=WizardSettings)

    @classmethod
    def from_file(cls, file_path: str) -> "Settings":
        """Load settings from a YAML or JSON file.

        Args:
            file_path: Path to the configuration file.

        Returns:
            Settings instance loaded from file.
        """
        import yaml
        import json

        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in [".yaml", ".yml"]:
                config_data = yaml.safe_load(f) or {}
            elif path.suffix.lower() == ".json":
                config_data = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration file format: {path.suffix}")

        return cls(**config_data)

    def to_file(self, file_path: str) -> None:
        """Save settings to a YAML or JSON file.

        Args:
            file_path: Path where to save the configuration file.
        """
        import yaml
        import json

        path = Path(file_path)
        config_data = self.model_dump()

        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() in [".yaml", ".yml"]:
                yaml.dump(config_data, f, default_flow_style=False, sort_keys=False)
            elif path.suffix.lower() == ".json":
                json.dump(config_data, f, indent=2, sort_keys=False)
            else:
                raise ValueError(f"Unsupported configuration file format: {path.suffix}")

    def get_data_directory(self) -> Path:
        """Get the application data directory."""
        if self.debug:
            return Path.cwd() / "data"
        return Path.home() / ".abtest_admin"

    def get_log_directory(self) -> Path:
        """Get the application log directory."""
        return self.get_data_directory() / "logs"

    def get_database_path(self) -> Path:
        """Get the preview session database file path."""
        if self.storage.path:
            return Path(self.storage.path)
        return self.get_data_directory() / "preview.db"

    def get_database_url(self) -> str:
        """Get the async SQLAlchemy URL for the preview session database."""
        if self.storage.url:
            return self.storage.url
        return f"sqlite+aiosqlite:///{self.get_database_path().absolute()}"

"""Configuration manager implementation."""

from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from ..core.exceptions import ConfigurationError
from .settings import Settings


class ConfigManager:
    """Configuration manager with file and environment variable support."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the configuration manager.

        Args:
            settings: Settings instance. If None, loads default settings.
        """
        self.settings = settings or Settings()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            key: Configuration key (dot-separated for nested access).
            default: Default value if key is not found.

        Returns:
            Configuration value or default.
        """
        value: Any = self.settings.model_dump()

        for k in key.split("."):
            if not isinstance(value, dict) or k not in value:
                return default
            value = value[k]
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value.

        Args:
            key: Configuration key (dot-separated for nested access).
            value: Value to set.
        """
        keys = key.split(".")
        config_dict = self.settings.model_dump()

        # Navigate to the parent of the target key
        target = config_dict
        for k in keys[:-1]:
            target = target.setdefault(k, {})

        target[keys[-1]] = value
        self.settings = Settings(**config_dict)

    def has(self, key: str) -> bool:
        """Check if a configuration key exists."""
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def load_from_file(self, file_path: str) -> None:
        """Load configuration from a YAML or JSON file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid.
        """
        try:
            self.settings = Settings.from_file(file_path)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot load configuration from {file_path}: {e}") from e

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to a YAML or JSON file."""
        self.settings.to_file(file_path)

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values as a nested dictionary."""
        return self.settings.model_dump()

    def update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from a dictionary."""
        current_config = self.settings.model_dump()
        current_config.update(config_dict)
        self.settings = Settings(**current_config)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get a configuration section as a dictionary."""
        return self.settings.model_dump().get(section, {})

    def set_section(self, section: str, values: Dict[str, Any]) -> None:
        """Replace a configuration section."""
        config_dict = self.settings.model_dump()
        config_dict[section] = values
        self.settings = Settings(**config_dict)

    def create_default_config(self, file_path: str) -> None:
        """Create a default configuration file."""
        Settings().to_file(file_path)

    def get_data_directory(self) -> Path:
        return self.settings.get_data_directory()

    def get_log_directory(self) -> Path:
        return self.settings.get_log_directory()

    def get_database_url(self) -> str:
        return self.settings.get_database_url()

    def ensure_directories_exist(self) -> None:
        """Ensure that all required directories exist."""
        self.get_data_directory().mkdir(parents=True, exist_ok=True)
        self.get_log_directory().mkdir(parents=True, exist_ok=True)

    def validate_config(self) -> List[str]:
        """Validate the current configuration.

        Returns:
            List of validation error messages. Empty list if valid.
        """
        errors = []

        parsed = urlparse(self.settings.api.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"API base URL is not a valid http(s) URL: {self.settings.api.base_url}")

        if self.settings.api.timeout <= 0:
            errors.append("API timeout must be positive")

        wizard = self.settings.wizard
        if not 0 < wizard.min_traffic_allocation <= wizard.max_traffic_allocation <= 100:
            errors.append("Wizard traffic bounds must satisfy 0 < min <= max <= 100")
        if wizard.traffic_step <= 0:
            errors.append("Wizard traffic step must be positive")
        if wizard.total_combinations <= 0:
            errors.append("Wizard total combinations must be positive")

        # Check database directory is writable
        if not self.settings.storage.url:
            db_dir = self.settings.get_database_path().parent
            try:
                db_dir.mkdir(parents=True, exist_ok=True)
                test_file = db_dir / ".write_test"
                test_file.write_text("test")
                test_file.unlink()
            except OSError as e:
                errors.append(f"Database path is not writable: {e}")

        return errors

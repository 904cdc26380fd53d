"""Process configuration management for AutoAssigner."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from autoassigner.models.config import AutoAssignerConfig
from autoassigner.utils.exceptions import ConfigurationError


DEFAULT_CONFIG_PATH = Path("config.json")


class ConfigManager:
    """Loads the process configuration from a file, .env and the environment."""

    # Environment variable to config key mapping
    ENV_MAPPINGS = {
        "AUTOASSIGNER_DATA_DIR": "storage.data_dir",
        "AUTOASSIGNER_CONF_DIR": "storage.conf_dir",
        "AUTOASSIGNER_INOUT_API_URL_PREFIX": "availability.inout_api_url_prefix",
        "AUTOASSIGNER_INOUT_UNAVAILABLE_STATUSES": "availability.inout_unavailable_statuses",
        "AUTOASSIGNER_INOUT_STATUS_FIELD": "availability.inout_status_field",
        "AUTOASSIGNER_INOUT_TIMEOUT": "availability.timeout",
    }

    def __init__(self, config_path: Optional[Path] = None, load_env: bool = True):
        """Initialize configuration manager.

        Args:
            config_path: Path to the configuration file. Defaults to
                config.json in the current directory
            load_env: Whether to load a .env file from the current directory
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        if load_env:
            self._load_env_file()

    def _load_env_file(self) -> None:
        """Load .env file from current working directory."""
        env_file = Path.cwd() / ".env"
        if env_file.exists():
            load_dotenv(env_file, override=False)

    def load_config(self) -> AutoAssignerConfig:
        """Load and validate the configuration.

        The file is parsed with PyYAML, so both JSON and YAML are accepted.
        Environment variables override values from the file.

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        if not self.config_path.exists():
            raise ConfigurationError(
                f"config file does not exist: {self.config_path}",
                details={"config_path": str(self.config_path)},
                suggestion="Create a config.json file or specify a different path with --config",
                error_code="AA001"
            )
        if not self.config_path.is_file():
            raise ConfigurationError(
                f"config path is not a regular file: {self.config_path}",
                details={"config_path": str(self.config_path)},
                error_code="AA001"
            )

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"failed to parse config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"failed to read config file: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                "failed to parse config file: top level must be a mapping",
                details={"config_path": str(self.config_path)}
            )

        self._apply_overrides(config_data, self.get_env_overrides())

        try:
            return AutoAssignerConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(
                f"invalid config: {e}",
                details={"config_path": str(self.config_path)},
                suggestion="Check your config file format and required fields"
            ) from e

    def get_env_overrides(self) -> Dict[str, Any]:
        """Extract configuration overrides from environment variables.

        Examples:
            AUTOASSIGNER_DATA_DIR -> storage.data_dir
            AUTOASSIGNER_INOUT_UNAVAILABLE_STATUSES=OOO,AWAY -> ["OOO", "AWAY"]

        Returns:
            Dictionary of environment overrides
        """
        overrides: Dict[str, Any] = {}
        for env_key, config_key in self.ENV_MAPPINGS.items():
            value = os.getenv(env_key)
            if value is None:
                continue
            if config_key.endswith("inout_unavailable_statuses"):
                overrides[config_key] = [s.strip() for s in value.split(",") if s.strip()]
            else:
                overrides[config_key] = value
        return overrides

    def _apply_overrides(self, config_dict: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        """Apply overrides to configuration dictionary.

        Args:
            config_dict: Configuration dictionary to modify
            overrides: Override values to apply
        """
        for key, value in overrides.items():
            if value is not None:
                # Handle nested keys like "storage.data_dir"
                keys = key.split('.')
                current = config_dict

                for k in keys[:-1]:
                    current = current.setdefault(k, {})

                current[keys[-1]] = value

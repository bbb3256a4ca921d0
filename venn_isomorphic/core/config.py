"""
Configuration management for venn-isomorphic.

This module provides a singleton `ConfigurationManager` class to load and access
configuration settings from YAML files. It supports environment-specific
configurations (e.g., development, production) and allows easy access to
nested configuration values.

Key Features:
- Loads settings from YAML files based on the VENN_ENV environment variable.
- Defaults to 'development' environment if VENN_ENV is not set.
- Provides a global `config_manager` instance for easy access.
- Supports dot notation for accessing nested keys (e.g., "components.venn_renderer.browser_type").
"""
import os
import yaml
from typing import Any, Dict, Optional

# The YAML files ship inside the package: venn_isomorphic/config/<env>.yaml
CONFIG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "config")

# DEFAULT_ENV: The default environment to use if VENN_ENV is not set.
DEFAULT_ENV = "development"
ENV_VARIABLE = "VENN_ENV"


class ConfigError(Exception):
    """Base class for all configuration-loading errors."""
    pass


class ConfigFileNotFoundError(ConfigError):
    """Raised when a specific configuration file (e.g., development.yaml) cannot be found."""
    pass


class InvalidYamlError(ConfigError):
    """Raised when a configuration file contains invalid YAML syntax or is not a dictionary."""
    pass


class ConfigurationManager:
    """
    Manages loading and accessing configuration settings from YAML files.

    This class is implemented as a singleton. The first time an instance is created,
    it loads the configuration. Subsequent instantiations return the existing instance.
    The directory the files are read from is the `CONFIG_DIR` class attribute, which
    tests may point elsewhere.
    """
    CONFIG_DIR: str = CONFIG_DIR

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}
    _current_env: str = ""

    def __new__(cls) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super(ConfigurationManager, cls).__new__(cls)
            cls._instance.load_config()
        return cls._instance

    def load_config(self, env: Optional[str] = None) -> None:
        """
        Loads configuration from a YAML file corresponding to the specified environment.

        The environment is determined in the following order of precedence:
        1. The `env` parameter passed to this method.
        2. The `VENN_ENV` environment variable.
        3. `DEFAULT_ENV` (if neither of the above is set).

        Args:
            env (Optional[str]): The specific environment name (e.g., "production") to load.

        Raises:
            ConfigFileNotFoundError: If the YAML file for the target environment is not found.
            InvalidYamlError: If the YAML file is malformed or not a dictionary.
        """
        target_env = env or os.getenv(ENV_VARIABLE, DEFAULT_ENV)
        config_file_path = os.path.join(self.CONFIG_DIR, f"{target_env}.yaml")

        try:
            with open(config_file_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigFileNotFoundError(
                f"Configuration file not found for environment '{target_env}' at '{config_file_path}'. "
                f"Ensure '{target_env}.yaml' exists in the '{self.CONFIG_DIR}' directory."
            )
        except yaml.YAMLError as e:
            raise InvalidYamlError(
                f"Error parsing YAML in configuration file '{config_file_path}': {e}"
            )
        if not isinstance(loaded, dict):
            raise InvalidYamlError(
                f"Configuration file '{config_file_path}' does not contain a valid YAML dictionary."
            )

        self._config = loaded
        self._current_env = target_env

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Retrieves a configuration value for the given key.

        Supports accessing nested values using dot notation (e.g., "logging.level").
        If any part of the key is missing, returns the provided default value.

        Args:
            key (str): The configuration key to retrieve.
            default (Optional[Any]): The value to return if the key is not found.

        Returns:
            Any: The configuration value if found, otherwise the default value.
        """
        value: Any = self._config
        for k_part in key.split("."):
            if not isinstance(value, dict) or k_part not in value:
                return default
            value = value[k_part]
        return value

    def reload_config(self, env: Optional[str] = None) -> None:
        """
        Reloads the configuration, optionally switching to a different environment.

        Args:
            env (Optional[str]): The environment to reload. If None, reloads the
                                 currently active environment.
        """
        self.load_config(env or self._current_env or None)

    @property
    def current_environment(self) -> str:
        """The name of the currently loaded configuration environment."""
        return self._current_env


# Global instance, created on first import; this triggers the initial load.
config_manager = ConfigurationManager()


def get_config(key: str, default: Optional[Any] = None) -> Any:
    """
    A convenience function to access configuration values via the global `config_manager`.

    Args:
        key (str): The configuration key (dot notation for nested values).
        default (Optional[Any]): Default value if the key is not found.

    Returns:
        Any: The configuration value or the default.
    """
    return config_manager.get(key, default)

from .config import get_config, config_manager, ConfigurationManager, ConfigError, ConfigFileNotFoundError, InvalidYamlError
from .exceptions import (
    VennIsomorphicError,
    ConfigurationError,
    ComponentError,
    RendererError,
    BrowserLaunchError,
    PageSetupError,
    DiagramRenderError,
)
from .logger import setup_logging, get_logger

__all__ = [
    # Config
    "get_config",
    "config_manager",
    "ConfigurationManager",
    "ConfigError",
    "ConfigFileNotFoundError",
    "InvalidYamlError",
    # Logger
    "setup_logging",
    "get_logger",
    # Exceptions
    "VennIsomorphicError",
    "ConfigurationError",
    "ComponentError",
    "RendererError",
    "BrowserLaunchError",
    "PageSetupError",
    "DiagramRenderError",
]

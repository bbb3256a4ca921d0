"""
Centralized logging setup for venn-isomorphic.

This module provides functions to configure and obtain logger instances
throughout the package. Logging settings are read from the 'logging' section
of the YAML configuration, supporting console and rotating file handlers.

Key Functions:
- `setup_logging()`: Initializes the logging system based on external configuration.
                     Should be called once at application startup.
- `get_logger(name)`: Returns a logger instance for the specified module name.
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from venn_isomorphic.core.config import ConfigurationManager

# Relative log file paths from the configuration are resolved against the project root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s - %(message)s"
BASIC_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_logging_initialized = False


def setup_logging(config: Optional[ConfigurationManager] = None) -> None:
    """
    Sets up centralized logging using the 'logging' section of the configuration.

    Configures the root logger with the handlers (console, rotating file) and
    the format given in the configuration. Falls back to `logging.basicConfig`
    when the configuration has no 'logging' section. Calling it more than once
    is a no-op.

    Args:
        config (Optional[ConfigurationManager]): The configuration manager to read from.
            If None, the global `config_manager` is used.
    """
    global _logging_initialized
    if _logging_initialized:
        logging.getLogger(__name__).debug("setup_logging: already initialized.")
        return

    if config is None:
        from venn_isomorphic.core.config import config_manager as config
    log_settings: Optional[Dict[str, Any]] = config.get("logging")

    if not log_settings:
        logging.basicConfig(level=logging.INFO, format=BASIC_LOG_FORMAT)
        logging.getLogger(__name__).warning("Logging setup: 'logging' section not found in configuration. Using basicConfig.")
        _logging_initialized = True
        return

    log_level_str = str(log_settings.get("level", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    log_format = log_settings.get("format", DEFAULT_LOG_FORMAT)

    root_logger = logging.getLogger()
    # Drop handlers installed by basicConfig or an earlier setup to avoid duplicate lines.
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)
    formatter = logging.Formatter(log_format)

    handlers = log_settings.get("handlers", {}) or {}
    console_settings = handlers.get("console", {}) or {}
    if console_settings.get("enabled", False):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    file_settings = handlers.get("file", {}) or {}
    log_file_path = None
    if file_settings.get("enabled", False):
        log_file_path = os.path.join(PROJECT_ROOT, file_settings.get("path", "logs/venn_isomorphic.log"))
        max_bytes = int(file_settings.get("max_bytes", 10 * 1024 * 1024))
        backup_count = int(file_settings.get("backup_count", 5))
        try:
            os.makedirs(os.path.dirname(log_file_path), exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=log_file_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            logging.getLogger(__name__).error(
                f"Logging setup: Failed to configure file logging at '{log_file_path}': {e}. File logging disabled.",
                exc_info=True,
            )
            log_file_path = None

    # Playwright's own loggers are chatty at DEBUG.
    for noisy in log_settings.get("quiet_loggers", []) or []:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _logging_initialized = True
    module_logger = logging.getLogger(__name__)
    module_logger.info(f"Logging system initialized. Level: {log_level_str}.")
    if log_file_path:
        module_logger.debug(f"File logging handler enabled at path: {log_file_path}")


def get_logger(name: str) -> logging.Logger:
    """
    Retrieves a logger instance with the specified name.

    If `setup_logging()` has not run yet, falls back to `logging.basicConfig`
    so early messages are not lost. `basicConfig` leaves a root logger that the
    host application already configured untouched, and a later `setup_logging()`
    call still replaces the fallback handler.

    Args:
        name (str): The name for the logger, typically `__name__` of the calling module.

    Returns:
        logging.Logger: An instance of `logging.Logger`.
    """
    if not _logging_initialized:
        logging.basicConfig(level=logging.INFO, format=BASIC_LOG_FORMAT)
    return logging.getLogger(name)


def reset_logging() -> None:
    """Marks logging as uninitialized so `setup_logging()` runs again. Used by tests."""
    global _logging_initialized
    _logging_initialized = False

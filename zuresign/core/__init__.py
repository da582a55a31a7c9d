"""
ZureSign core: configuration and logging.
"""

from .config_manager import ConfigManager, ZureSignConfig, LoggingConfig, parse_connection_string
from .logging_config import setup_logging, get_logger, log_with_context

__all__ = [
    "ConfigManager",
    "ZureSignConfig",
    "LoggingConfig",
    "parse_connection_string",
    "setup_logging",
    "get_logger",
    "log_with_context",
]

"""
Service logger setup

Configures the root logger once per process from LoggingConfig and hands
back a named logger for the service.
"""

import logging
import sys
from typing import Optional

from .config.logging_config import LoggingConfig

_configured = False


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure process logging and return the service logger.

    Args:
        service_name: Logger name used by the service entrypoint
        level: Overrides the configured log level
        config: Logging settings (defaults to LoggingConfig.from_env())

    Returns:
        Logger named after the service
    """
    global _configured

    if not _configured:
        config = config or LoggingConfig.from_env()
        formatter = logging.Formatter(config.log_format)
        root = logging.getLogger()
        root.setLevel((level or config.log_level).upper())

        if config.enable_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)

        if config.log_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        # kafka-python is chatty at DEBUG
        logging.getLogger("kafka").setLevel(logging.WARNING)
        _configured = True

    return logging.getLogger(service_name)

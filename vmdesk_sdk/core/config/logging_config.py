#!/usr/bin/env python3
"""Logging configuration"""
import logging
import os
from dataclasses import dataclass

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        """Load logging config from environment"""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT)
        )


def setup_logging(config: LoggingConfig = None) -> logging.Logger:
    """
    Attach a stream handler to the ``vmdesk_sdk`` logger.

    Safe to call repeatedly; only one handler is ever installed.
    """
    config = config or LoggingConfig.from_env()
    sdk_logger = logging.getLogger("vmdesk_sdk")
    sdk_logger.setLevel(config.log_level.upper())

    if not any(getattr(h, "_vmdesk_handler", False) for h in sdk_logger.handlers):
        handler = logging.StreamHandler()
        handler._vmdesk_handler = True
        sdk_logger.addHandler(handler)

    for handler in sdk_logger.handlers:
        if getattr(handler, "_vmdesk_handler", False):
            handler.setFormatter(logging.Formatter(config.log_format))

    return sdk_logger

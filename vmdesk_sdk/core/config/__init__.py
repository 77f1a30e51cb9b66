#!/usr/bin/env python3
"""Configuration for the VMDesk SDK

Configuration hierarchy:
- client_config: remote endpoint, credential and transport settings
- logging_config: logging configuration

Values are read with the usual priority:
  1. Environment variables (highest priority)
  2. The env file named by VMDESK_ENV_FILE (default: .env)
  3. Defaults
"""
import os
import logging

from dotenv import load_dotenv

from .logging_config import LoggingConfig, setup_logging
from .client_config import ClientConfig

logger = logging.getLogger(__name__)

_env_file = os.getenv("VMDESK_ENV_FILE", ".env")
if load_dotenv(_env_file, override=False):
    logger.debug("Loaded environment from %s", _env_file)

# Create global settings instance
settings = ClientConfig.from_env()


def get_settings() -> ClientConfig:
    """Get global settings instance"""
    return settings


def reload_settings() -> ClientConfig:
    """Reload settings from environment"""
    global settings
    settings = ClientConfig.from_env()
    return settings


__all__ = [
    'ClientConfig',
    'LoggingConfig',
    'get_settings',
    'reload_settings',
    'settings',
    'setup_logging',
]

"""Configuration management for echopan."""

from .loader import Config, load_config, save_config
from .models import (
    ConfigModel,
    DatabaseConfig,
    LoggingConfig,
    PublishConfig,
    ServiceConfig,
    SyncConfig,
    TelegramConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "DatabaseConfig",
    "LoggingConfig",
    "PublishConfig",
    "ServiceConfig",
    "SyncConfig",
    "TelegramConfig",
    "load_config",
    "save_config",
]

"""Configuration management for typeinject.

Supports YAML configuration files, environment variable overrides and
validation into typed settings.
"""

from .loader import ConfigurationLoader
from .manager import ConfigurationManager
from .settings import ContainerSettings, LoggingSettings, Settings

__all__ = [
    "ConfigurationManager",
    "ConfigurationLoader",
    "ContainerSettings",
    "LoggingSettings",
    "Settings",
]

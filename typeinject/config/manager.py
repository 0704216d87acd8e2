"""Configuration management for typeinject.

Configuration is merged from, lowest priority first:
1. Project config: ./typeinject.yaml
2. Explicit config file passed by the caller
3. Environment variables (TYPEINJECT_<SECTION>__<KEY>)
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError

from ..errors import ConfigurationError
from .loader import ConfigurationLoader
from .settings import ContainerSettings, LoggingSettings, Settings

ENV_PREFIX = "TYPEINJECT_"
PROJECT_CONFIG_NAME = "typeinject.yaml"


class ConfigurationManager:
    """Loads, merges and validates typeinject configuration."""

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        project_config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize configuration manager.

        Args:
            config_path: Explicit config file; must exist when given
            project_config_path: Project config file, used only if it exists
            environ: Environment mapping (defaults to ``os.environ``)
        """
        self.loader = ConfigurationLoader()
        self.config_path = Path(config_path) if config_path else None
        self.project_config_path = (
            Path(project_config_path) if project_config_path else Path.cwd() / PROJECT_CONFIG_NAME
        )
        self._environ = os.environ if environ is None else environ
        self._settings_cache: Optional[Settings] = None

    def load_configuration(self) -> Dict[str, Any]:
        """Load the merged configuration dictionary.

        Raises:
            ConfigurationError: If the explicit config file is missing or invalid
        """
        config: Dict[str, Any] = {}

        if self.project_config_path.exists():
            config = self.loader.merge_configs(
                config, self.loader.load_yaml(self.project_config_path)
            )
            logger.debug(f"Loaded project configuration from {self.project_config_path}")

        if self.config_path is not None:
            config = self.loader.merge_configs(config, self.loader.load_yaml(self.config_path))
            logger.debug(f"Loaded configuration from {self.config_path}")

        return self._apply_env_overrides(config)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides.

        ``TYPEINJECT_CONTAINER__THREAD_SAFE=true`` sets
        ``config["container"]["thread_safe"] = True``. Sections and keys are
        separated by a double underscore so keys may contain single ones.
        """
        overrides: Dict[str, Any] = {}
        for key, value in self._environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            path = [part.lower() for part in key[len(ENV_PREFIX):].split("__") if part]
            if len(path) < 2:
                continue

            current = overrides
            for part in path[:-1]:
                current = current.setdefault(part, {})
            current[path[-1]] = self._convert_env_value(value)

        return self.loader.merge_configs(config, overrides)

    def _convert_env_value(self, value: str) -> Union[str, int, float, bool]:
        """Convert an environment variable string to bool, int or float where possible."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def load_settings(self) -> Settings:
        """Load and validate settings, caching the result.

        Raises:
            ConfigurationError: If the configuration does not validate
        """
        if self._settings_cache is not None:
            return self._settings_cache

        config = self.load_configuration()
        try:
            settings = Settings.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid typeinject configuration: {e}",
                config_path=self.config_path,
                cause=e,
            )

        self._settings_cache = settings
        return settings

    def container_settings(self) -> ContainerSettings:
        return self.load_settings().container

    def logging_settings(self) -> LoggingSettings:
        return self.load_settings().logging

    def get_config(self, key: str, default: Any = None) -> Any:
        """Get a raw configuration value by dot-notation key (e.g. ``"container.thread_safe"``)."""
        current: Any = self.load_configuration()
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

"""Configuration loading utilities."""

import copy
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..errors import ConfigurationError


class ConfigurationLoader:
    """Utility class for loading configuration files."""

    def load_yaml(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Configuration dictionary (empty for an empty file)

        Raises:
            ConfigurationError: If the file is missing, invalid YAML or not a mapping
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}", config_path=path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", config_path=path, cause=e)

        if not isinstance(content, dict):
            raise ConfigurationError(
                f"Configuration file must contain a dictionary: {path}",
                config_path=path,
            )
        return content

    def merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries with deep merging.

        The override dict takes precedence over the base dict.
        Nested dictionaries are merged recursively.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self.merge_configs(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

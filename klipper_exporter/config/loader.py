"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
from .models import ExporterConfig


class ConfigLoader:
    """Load and validate exporter configuration."""

    @staticmethod
    def load(
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> ExporterConfig:
        """
        Build the exporter configuration.

        Values come from the optional YAML file first; any non-None
        override (typically a command-line flag) replaces them.

        Args:
            config_path: Optional path to a YAML configuration file
            overrides: Field values taking precedence over the file

        Returns:
            ExporterConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If configuration validation fails
        """
        raw_config: Dict[str, Any] = {}
        if config_path:
            raw_config = ConfigLoader.load_yaml(config_path)

        for key, value in (overrides or {}).items():
            if value is not None:
                raw_config[key] = value

        return ExporterConfig(**raw_config)

    @staticmethod
    def load_yaml(config_path: str) -> Dict[str, Any]:
        """
        Read a YAML configuration file with ${ENV_VAR} substitution.

        The file may either hold the settings at top level or nest them
        under an "exporter" key.
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        if not isinstance(raw_config, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        raw_config = raw_config.get("exporter", raw_config)
        return ConfigLoader._substitute_env_vars(raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj

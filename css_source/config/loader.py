"""
Configuration loading and management.

Reads per-project language options from ``.css-source.json``, applies
environment variable overrides and caches the result per project path.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Union
import logging

from ..models.config import GlobalSettings, LanguageOptions
from .defaults import CONFIG_FILE_NAME, CONFIG_VERSION, ENV_VAR_MAPPING, get_default_language_options

logger = logging.getLogger(__name__)


class ConfigurationLoader:
    """Load and save per-project language options"""

    def __init__(self, global_settings: GlobalSettings = None):
        self.global_settings = global_settings or GlobalSettings()
        self.config_cache: Dict[str, LanguageOptions] = {}

    def get_config_file(self, project_path: Union[str, Path]) -> Path:
        return Path(project_path).resolve() / CONFIG_FILE_NAME

    def load_language_options(self, project_path: Union[str, Path]) -> LanguageOptions:
        """Load language options for a project, falling back to defaults"""
        project_path = Path(project_path).resolve()

        # Check cache first
        cache_key = str(project_path)
        if cache_key in self.config_cache:
            return self.config_cache[cache_key]

        config_file = project_path / CONFIG_FILE_NAME

        if config_file.exists():
            options = self._load_existing_config(config_file)
        else:
            options = self._create_default_options()

        self.config_cache[cache_key] = options
        return options

    def _load_existing_config(self, config_file: Path) -> LanguageOptions:
        """Load existing configuration file with validation"""
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError("configuration root must be an object")

            # Apply environment variable overrides
            data = self._apply_env_overrides(data)

            options = {**get_default_language_options(), **data.get('language_options', {})}
            return LanguageOptions.from_dict(options)

        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.error(f"Failed to load config from {config_file}: {e}")
            return self._create_default_options()

    def _create_default_options(self) -> LanguageOptions:
        """Create language options from global settings and environment"""
        config_data = {'language_options': self.global_settings.default_language_options().to_dict()}
        config_data = self._apply_env_overrides(config_data)
        return LanguageOptions.from_dict(config_data['language_options'])

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration"""
        for env_var, config_path in ENV_VAR_MAPPING.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                self._set_nested_value(config_data, config_path, env_value)

        return config_data

    def _set_nested_value(self, data: Dict[str, Any], path: str, value: str) -> None:
        """Set nested dictionary value using dot notation path"""
        keys = path.split('.')
        current = data

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = self._convert_env_value(value)

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to appropriate type"""
        # Boolean conversion
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False

        # Numeric conversion
        try:
            if '.' in value:
                return float(value)
            else:
                return int(value)
        except ValueError:
            pass

        return value

    def save_language_options(
        self,
        project_path: Union[str, Path],
        options: LanguageOptions
    ) -> bool:
        """Save language options to the project's configuration file"""
        config_file = self.get_config_file(project_path)

        try:
            config_data = {
                'version': CONFIG_VERSION,
                'language_options': options.to_dict()
            }

            with open(config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=2, ensure_ascii=False)

            logger.info(f"Saved configuration to {config_file}")

            self.config_cache[str(config_file.parent)] = options
            return True

        except OSError as e:
            logger.error(f"Failed to save config to {config_file}: {e}")
            return False

    def clear_cache(self) -> None:
        """Clear configuration cache"""
        self.config_cache.clear()
        logger.info("Configuration cache cleared")

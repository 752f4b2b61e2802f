"""
Configuration loading for content-sync projects.

Reads ``.content-sync/config.json`` under the project root, applies
environment variable overrides and produces LoaderSettings.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Union
import logging

from ..models.config import LoaderSettings
from .defaults import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    ENV_VAR_MAPPING,
    STRING_SETTINGS,
    get_default_settings,
)

logger = logging.getLogger(__name__)


class ConfigurationLoader:
    """Load and save per-project loader settings"""

    def __init__(self):
        self.config_cache: Dict[str, LoaderSettings] = {}

    def load(self, project_root: Union[str, Path]) -> LoaderSettings:
        """Load settings for ``project_root``, falling back to defaults"""
        project_root = Path(project_root).expanduser().resolve()

        cache_key = str(project_root)
        if cache_key in self.config_cache:
            return self.config_cache[cache_key]

        config_data = get_default_settings()

        config_file = project_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if config_file.exists():
            config_data.update(self._load_config_file(config_file))

        config_data = self._apply_env_overrides(config_data)
        config_data['project_root'] = project_root

        settings = LoaderSettings(**config_data)
        self.config_cache[cache_key] = settings
        return settings

    def _load_config_file(self, config_file: Path) -> Dict[str, Any]:
        """Read a config file; invalid content yields no overrides"""
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError("Config file must contain a JSON object")

            data.pop('project_root', None)
            return data

        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Failed to load config from {config_file}: {e}")
            return {}

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration"""
        for env_var, key in ENV_VAR_MAPPING.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                if key in STRING_SETTINGS:
                    config_data[key] = env_value
                else:
                    config_data[key] = self._convert_env_value(env_value)

        return config_data

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

    def save(self, settings: LoaderSettings) -> Path:
        """Write ``settings`` to the project's config file"""
        settings.config_dir.mkdir(parents=True, exist_ok=True)

        with open(settings.config_file, 'w', encoding='utf-8') as f:
            json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)

        logger.info(f"Saved configuration to {settings.config_file}")
        self.config_cache[str(settings.project_root)] = settings
        return settings.config_file

    def clear_cache(self) -> None:
        """Clear configuration cache"""
        self.config_cache.clear()

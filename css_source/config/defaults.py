"""
Default configuration values for css-source.

Centralized defaults that can be overridden by environment variables or config files.
"""

import logging
from typing import Any, Dict, Optional

from ..models.config import GlobalSettings

# Per-project configuration file name
CONFIG_FILE_NAME = ".css-source.json"

CONFIG_VERSION = "1.0.0"

# Global default settings
DEFAULT_SETTINGS = {
    # Parsing
    "language_options": {
        "tolerant": False,
        "max_file_size_mb": 10
    },

    # Logging
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    }
}

# Environment variable mappings, same names GlobalSettings reads
ENV_VAR_MAPPING = {
    'CSS_SOURCE_DEFAULT_TOLERANT': 'language_options.tolerant',
    'CSS_SOURCE_MAX_FILE_SIZE_MB': 'language_options.max_file_size_mb'
}


def get_default_language_options() -> Dict[str, Any]:
    """Get default language options as stored in a project configuration file"""
    return dict(DEFAULT_SETTINGS['language_options'])


def configure_logging(
    level: Optional[str] = None,
    settings: Optional[GlobalSettings] = None
) -> None:
    """Configure root logging, defaulting to the level from global settings"""
    if level is None:
        level = (settings or GlobalSettings()).log_level

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=DEFAULT_SETTINGS['logging']['format']
    )

"""
Configuration management for css-source

Handles loading and validation of per-project language options.
"""

from .loader import ConfigurationLoader
from .defaults import DEFAULT_SETTINGS, configure_logging

__all__ = ["ConfigurationLoader", "DEFAULT_SETTINGS", "configure_logging"]

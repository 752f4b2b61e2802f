"""
Configuration management for content-sync

Handles loading, environment overrides and persistence of loader settings.
"""

from .loader import ConfigurationLoader
from .defaults import DEFAULT_SETTINGS

__all__ = ["ConfigurationLoader", "DEFAULT_SETTINGS"]

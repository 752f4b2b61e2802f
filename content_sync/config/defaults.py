"""
Default configuration values for content-sync.

Centralized defaults that can be overridden by environment variables or the
project config file.
"""

from typing import Any, Dict

CONFIG_DIR_NAME = ".content-sync"
CONFIG_FILE_NAME = "config.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    # Where module keys are resolved from
    "source_dir": "src",

    # Explicit base directory (None = infer from tracked paths)
    "base": None,

    # Persistent store, relative to the project root
    "store_path": f"{CONFIG_DIR_NAME}/store.json",

    # Bulk pass concurrency limit (0 = unbounded)
    "max_concurrency": 0,

    # Keep watching after the bulk pass
    "watch": False,

    "log_level": "INFO",
}

# Environment variable mappings
ENV_VAR_MAPPING = {
    'CONTENT_SYNC_SOURCE_DIR': 'source_dir',
    'CONTENT_SYNC_BASE': 'base',
    'CONTENT_SYNC_STORE_PATH': 'store_path',
    'CONTENT_SYNC_MAX_CONCURRENCY': 'max_concurrency',
    'CONTENT_SYNC_WATCH': 'watch',
    'CONTENT_SYNC_LOG_LEVEL': 'log_level',
}

# Settings whose values must stay strings even if they look numeric/boolean
STRING_SETTINGS = {'source_dir', 'base', 'store_path', 'log_level'}


def get_default_settings() -> Dict[str, Any]:
    """Copy of the default settings"""
    return dict(DEFAULT_SETTINGS)

"""
content-sync package

Incremental synchronization of structured content modules into a
key-value content store, with live watching.
"""

__version__ = "1.0.0"

from .loader import ContentLoader
from .models import ContentModule, GenerateIdOptions, LoaderSettings, StoreRecord, SyncOutcome, SyncReport
from .storage import ContentStore, InMemoryContentStore, JsonFileContentStore
from .sync import (
    ConfigurationError,
    ConsistencyWarning,
    PerFileError,
    SyncEngine,
    WatchdogContentWatcher,
    generate_id_default,
)

__all__ = [
    "ContentLoader",
    "ContentModule",
    "GenerateIdOptions",
    "LoaderSettings",
    "StoreRecord",
    "SyncOutcome",
    "SyncReport",
    "ContentStore",
    "InMemoryContentStore",
    "JsonFileContentStore",
    "ConfigurationError",
    "ConsistencyWarning",
    "PerFileError",
    "SyncEngine",
    "WatchdogContentWatcher",
    "generate_id_default",
]

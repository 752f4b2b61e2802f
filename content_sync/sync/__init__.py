"""
Incremental content synchronization.

Keeps a key-value content store consistent with a changing set of source
files loaded as structured modules.

Key Components:
- BaseDirectoryResolver: Explicit or inferred root for entry paths
- IdentifierGenerator: Logical ids from entry paths and metadata
- FileIdentityIndex: Path -> last assigned id, for renames and unlinks
- ModuleProvider: Eager or lazy access to the tracked modules
- SyncEngine: Digest-aware bulk sync plus per-file change/unlink handling
- WatchEventRouter: Typed watch events -> engine calls
- WatchdogContentWatcher: Live filesystem notifications via watchdog
"""

from .base_dir import BaseDirectoryResolver
from .identifiers import IdentifierGenerator, generate_id_default
from .identity import FileIdentityIndex
from .providers import (
    EagerModuleProvider,
    LazyModuleProvider,
    ModuleProvider,
    module_provider_from_mapping,
)
from .collaborators import (
    CallableRenderer,
    PassthroughValidator,
    PydanticSchemaValidator,
    Sha256Digester,
    serialize_module,
)
from .engine import SyncEngine
from .events import WatchEvent, WatchEventKind
from .watcher import ContentWatcher, WatchdogContentWatcher
from .router import WatchEventRouter
from .errors import (
    ConfigurationError,
    ConsistencyWarning,
    ContentSyncError,
    EntryValidationError,
    ModuleLoadError,
    PerFileError,
    RenderError,
    StoreWriteError,
)

__all__ = [
    "BaseDirectoryResolver",
    "IdentifierGenerator",
    "generate_id_default",
    "FileIdentityIndex",
    "ModuleProvider",
    "EagerModuleProvider",
    "LazyModuleProvider",
    "module_provider_from_mapping",
    "CallableRenderer",
    "PassthroughValidator",
    "PydanticSchemaValidator",
    "Sha256Digester",
    "serialize_module",
    "SyncEngine",
    "WatchEvent",
    "WatchEventKind",
    "ContentWatcher",
    "WatchdogContentWatcher",
    "WatchEventRouter",
    "ConfigurationError",
    "ConsistencyWarning",
    "ContentSyncError",
    "EntryValidationError",
    "ModuleLoadError",
    "PerFileError",
    "RenderError",
    "StoreWriteError",
]

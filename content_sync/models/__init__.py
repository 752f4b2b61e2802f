"""
Core data models for content-sync

Pydantic models for loaded modules, store records and settings, plus the
result types reported by synchronization passes.
"""

from .entries import ContentModule, GenerateIdOptions, RenderedContent, StoreRecord
from .results import FileSyncResult, SyncOutcome, SyncReport
from .config import LoaderSettings

__all__ = [
    # Entries
    "ContentModule",
    "GenerateIdOptions",
    "RenderedContent",
    "StoreRecord",

    # Results
    "FileSyncResult",
    "SyncOutcome",
    "SyncReport",

    # Configuration
    "LoaderSettings",
]

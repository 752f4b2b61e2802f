"""
Content store implementations for content-sync.
"""

from .base import ContentStore
from .memory import InMemoryContentStore
from .json_store import JsonFileContentStore

__all__ = [
    "ContentStore",
    "InMemoryContentStore",
    "JsonFileContentStore",
]

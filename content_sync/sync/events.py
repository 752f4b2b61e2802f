"""
Watch Event Models.

Typed notifications emitted by a content watcher and consumed by the
WatchEventRouter.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict
from pydantic import BaseModel, Field, field_validator


class WatchEventKind(Enum):
    """Kinds of notifications a watcher emits"""
    ADD = "add"         # File appeared
    CHANGE = "change"   # File content changed
    UNLINK = "unlink"   # File removed


class WatchEvent(BaseModel):
    """A single filesystem notification for an absolute path"""

    kind: WatchEventKind
    path: Path
    timestamp: datetime = Field(default_factory=datetime.now)

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: Path) -> Path:
        """Ensure path is absolute"""
        if not v.is_absolute():
            raise ValueError('Watch event path must be absolute')
        return v

    @classmethod
    def add(cls, path: Path) -> 'WatchEvent':
        return cls(kind=WatchEventKind.ADD, path=path)

    @classmethod
    def change(cls, path: Path) -> 'WatchEvent':
        return cls(kind=WatchEventKind.CHANGE, path=path)

    @classmethod
    def unlink(cls, path: Path) -> 'WatchEvent':
        return cls(kind=WatchEventKind.UNLINK, path=path)

    @property
    def is_removal(self) -> bool:
        return self.kind == WatchEventKind.UNLINK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "kind": self.kind.value,
            "path": str(self.path),
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.kind.value.upper()}: {self.path}"

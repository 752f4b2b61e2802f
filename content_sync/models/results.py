"""
Synchronization result models.

Per-file outcomes and the aggregate report of a synchronization pass.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..sync.errors import PerFileError


class SyncOutcome(Enum):
    """What a single synchronization step did to the store"""
    CREATED = "created"       # New record written
    UPDATED = "updated"       # Existing record overwritten under the same id
    RENAMED = "renamed"       # Record moved from a previous id to a new one
    UNCHANGED = "unchanged"   # Digest matched, nothing written
    REMOVED = "removed"       # Record deleted on unlink
    SKIPPED = "skipped"       # Nothing to do (untracked or never synced)
    FAILED = "failed"         # Load, validation, render or store failure


@dataclass
class FileSyncResult:
    """Outcome of synchronizing one source file."""

    path: Path
    outcome: SyncOutcome
    entry: Optional[str] = None
    entry_id: Optional[str] = None
    previous_id: Optional[str] = None
    error: Optional['PerFileError'] = None
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.outcome != SyncOutcome.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization"""
        return {
            "path": str(self.path),
            "outcome": self.outcome.value,
            "entry": self.entry,
            "id": self.entry_id,
            "previous_id": self.previous_id,
            "error": str(self.error) if self.error else None,
            "duration_ms": self.duration_ms,
        }


@dataclass
class SyncReport:
    """Aggregate result of a synchronization pass."""

    base_dir: Optional[Path] = None
    results: List[FileSyncResult] = field(default_factory=list)
    warnings: List[Warning] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def add(self, result: FileSyncResult) -> None:
        self.results.append(result)

    def complete(self) -> None:
        self.completed_at = datetime.now()

    @property
    def succeeded(self) -> List[FileSyncResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[FileSyncResult]:
        return [r for r in self.results if not r.success]

    @property
    def errors(self) -> List['PerFileError']:
        return [r.error for r in self.results if r.error is not None]

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def count(self, outcome: SyncOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "base_dir": str(self.base_dir) if self.base_dir else None,
            "files": len(self.results),
            "outcomes": {o.value: self.count(o) for o in SyncOutcome},
            "warnings": [str(w) for w in self.warnings],
            "duration_seconds": self.duration_seconds,
        }

"""
Error taxonomy for content synchronization.

ConfigurationError aborts a run before any file is processed, PerFileError
subclasses are reported per file without affecting siblings, and
ConsistencyWarning is recorded but never raised.
"""

from pathlib import Path
from typing import Optional, Union


class ContentSyncError(Exception):
    """Base class for all content-sync errors"""


class ConfigurationError(ContentSyncError):
    """Invalid or ambiguous loader configuration (fatal to the run)"""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class PerFileError(ContentSyncError):
    """
    Failure while processing a single source file.

    The original exception is chained as ``__cause__``.
    """

    stage = "sync"

    def __init__(
        self,
        path: Union[str, Path],
        message: str,
        entry: Optional[str] = None,
        entry_id: Optional[str] = None
    ):
        self.path = Path(path)
        self.entry = entry
        self.entry_id = entry_id
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        target = self.entry or str(self.path)
        id_part = f" (id: {self.entry_id})" if self.entry_id else ""
        return f"[{self.stage}] {target}{id_part}: {self.message}"


class ModuleLoadError(PerFileError):
    """Loader function failed or produced an unusable module"""
    stage = "load"


class EntryValidationError(PerFileError):
    """Schema validation rejected the entry data"""
    stage = "validate"


class RenderError(PerFileError):
    """Renderer failed to serialize the module body"""
    stage = "render"


class StoreWriteError(PerFileError):
    """Content store rejected a read, write or delete"""
    stage = "store"


class ConsistencyWarning(UserWarning):
    """Non-fatal inconsistency, e.g. no tracked files matched"""

"""
File Identity Index.

In-memory bookkeeping of which logical id each tracked source file was
last stored under. Used for rename detection and for cleanup on unlink.
"""

import threading
from pathlib import Path, PurePath
from typing import Dict, Iterator, List, Optional, Tuple, Union


class FileIdentityIndex:
    """
    Mapping of absolute file path -> last-assigned logical id.

    Every operation takes an internal lock, so the index can be shared by
    coroutines running on several threads. The lock is never held across
    an await point; callers doing read-then-write must tolerate interleaving.
    """

    def __init__(self):
        self._ids: Dict[str, str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(path: Union[str, PurePath]) -> str:
        return str(Path(path))

    def get(self, path: Union[str, PurePath]) -> Optional[str]:
        """Last id assigned to ``path``, or None if never synced"""
        with self._lock:
            return self._ids.get(self._key(path))

    def set(self, path: Union[str, PurePath], entry_id: str) -> Optional[str]:
        """
        Record ``entry_id`` for ``path``.

        Returns:
            The previously recorded id, if any
        """
        with self._lock:
            key = self._key(path)
            previous = self._ids.get(key)
            self._ids[key] = entry_id
            return previous

    def pop(self, path: Union[str, PurePath]) -> Optional[str]:
        """Remove and return the id recorded for ``path``"""
        with self._lock:
            return self._ids.pop(self._key(path), None)

    def paths_for(self, entry_id: str) -> List[Path]:
        """All paths currently mapped to ``entry_id`` (more than one means a collision)"""
        with self._lock:
            return [Path(p) for p, i in self._ids.items() if i == entry_id]

    def snapshot(self) -> Dict[Path, str]:
        """Copy of the current mapping"""
        with self._lock:
            return {Path(p): i for p, i in self._ids.items()}

    def clear(self) -> None:
        with self._lock:
            self._ids.clear()

    def items(self) -> Iterator[Tuple[Path, str]]:
        return iter(self.snapshot().items())

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, PurePath)):
            return False
        with self._lock:
            return self._key(path) in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

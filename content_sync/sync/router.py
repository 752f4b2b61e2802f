"""
Watch Event Router.

Adapts watcher notifications into SyncEngine calls, restricted to the
originally tracked module set.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Set

from ..models.results import FileSyncResult
from .engine import SyncEngine
from .events import WatchEvent
from .watcher import ContentWatcher

logger = logging.getLogger(__name__)


class WatchEventRouter:
    """
    Routes typed watch events to the sync engine.

    ``add`` and ``change`` both resync the file; ``unlink`` removes it.
    Events for untracked paths are ignored. Overlapping events for the same
    path are not serialized here.
    """

    def __init__(self, engine: SyncEngine, tracked_paths: Optional[Iterable[Path]] = None):
        self.engine = engine
        paths = engine.provider.paths if tracked_paths is None else tracked_paths
        self.tracked_paths: Set[Path] = {Path(p) for p in paths}
        # Watchers may report symlink-resolved paths
        self._resolved: Dict[Path, Path] = {p.resolve(): p for p in self.tracked_paths}
        self._unsubscribe: Optional[Callable[[], None]] = None

        self.events_routed = 0
        self.events_ignored = 0

    def canonical_path(self, path: Path) -> Optional[Path]:
        """Tracked path matching ``path``, or None if untracked"""
        path = Path(path)
        if path in self.tracked_paths:
            return path
        return self._resolved.get(path.resolve())

    def is_tracked(self, path: Path) -> bool:
        return self.canonical_path(path) is not None

    async def dispatch(self, event: WatchEvent) -> Optional[FileSyncResult]:
        """
        Handle one notification.

        Returns:
            The engine's result, or None if the event was ignored
        """
        path = self.canonical_path(event.path)
        if path is None:
            self.events_ignored += 1
            logger.debug(f"Ignoring event for untracked path: {event}")
            return None

        self.events_routed += 1
        logger.debug(f"Routing watch event: {event.to_dict()}")

        if event.is_removal:
            return await self.engine.on_unlink(path)
        return await self.engine.on_change(path)

    async def _handle(self, event: WatchEvent) -> None:
        await self.dispatch(event)

    def attach(self, watcher: ContentWatcher) -> None:
        """Subscribe this router to ``watcher``"""
        if self._unsubscribe is not None:
            raise RuntimeError("Router is already attached to a watcher")
        self._unsubscribe = watcher.subscribe(self._handle)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

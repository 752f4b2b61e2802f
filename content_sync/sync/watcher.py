"""
Content Watchers.

A content watcher publishes ``add``/``change``/``unlink`` notifications to
its subscribers. WatchdogContentWatcher is the live implementation on top of
the watchdog library.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Set

from watchdog.events import FileSystemEventHandler, FileSystemEvent as WatchdogEvent
from watchdog.events import FileCreatedEvent, FileModifiedEvent, FileDeletedEvent, FileMovedEvent
from watchdog.observers import Observer

from .events import WatchEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[WatchEvent], Awaitable[object]]


class ContentWatcher(ABC):
    """
    Base class for watchers.

    Subscribers receive every emitted WatchEvent. A failing subscriber is
    logged and does not prevent delivery to the others.
    """

    def __init__(self):
        self._subscribers: List[EventHandler] = []
        self.directories: List[Path] = []

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """
        Register ``handler`` for all future events.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def add(self, directory: Path) -> None:
        """Begin tracking ``directory``"""
        directory = Path(directory)
        if directory in self.directories:
            return
        self.directories.append(directory)
        self._watch(directory)

    async def emit(self, event: WatchEvent) -> None:
        """Deliver ``event`` to every subscriber"""
        for handler in list(self._subscribers):
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Error in watch event subscriber for {event}: {e}")

    @property
    def is_running(self) -> bool:
        return False

    def _watch(self, directory: Path) -> None:
        """Hook for implementations that schedule directories eagerly"""

    @abstractmethod
    async def start(self) -> None:
        """Start delivering events"""

    @abstractmethod
    async def stop(self) -> None:
        """Stop delivering events and release resources"""

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()


def convert_watchdog_event(event: WatchdogEvent) -> List[WatchEvent]:
    """
    Translate a watchdog event into zero or more WatchEvents.

    Directory events and event types without a counterpart are dropped; a
    move becomes an unlink of the source followed by an add of the target.
    """
    if event.is_directory:
        return []

    src_path = Path(os.fsdecode(event.src_path)).absolute()

    if isinstance(event, FileMovedEvent):
        dest_path = Path(os.fsdecode(event.dest_path)).absolute()
        return [WatchEvent.unlink(src_path), WatchEvent.add(dest_path)]
    if isinstance(event, FileCreatedEvent):
        return [WatchEvent.add(src_path)]
    if isinstance(event, FileModifiedEvent):
        return [WatchEvent.change(src_path)]
    if isinstance(event, FileDeletedEvent):
        return [WatchEvent.unlink(src_path)]

    return []


class WatchdogContentWatcher(ContentWatcher):
    """
    Watcher backed by a watchdog observer.

    The observer runs on its own thread; events are handed to the asyncio
    loop with ``call_soon_threadsafe`` and each one is delivered in its own
    task, so notifications for different paths may interleave.
    """

    def __init__(self, recursive: bool = True, shutdown_timeout_s: float = 5.0):
        super().__init__()
        self.recursive = recursive
        self.shutdown_timeout_s = shutdown_timeout_s

        self.observer: Optional[Observer] = None
        self._handler: Optional['ContentEventHandler'] = None
        self._queue: Optional[asyncio.Queue] = None
        self._pump_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self.observer is not None

    def _watch(self, directory: Path) -> None:
        if self.observer is not None and self._handler is not None:
            self.observer.schedule(self._handler, str(directory), recursive=self.recursive)
            logger.info(f"Watching {directory} (recursive={self.recursive})")

    async def start(self) -> None:
        if self.is_running:
            logger.warning("Content watcher is already running")
            return

        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._handler = ContentEventHandler(loop, self._queue)

        self.observer = Observer()
        for directory in self.directories:
            if not directory.is_dir():
                logger.warning(f"Skipping missing watch directory: {directory}")
                continue
            self.observer.schedule(self._handler, str(directory), recursive=self.recursive)
            logger.info(f"Watching {directory} (recursive={self.recursive})")

        self.observer.start()
        self._pump_task = asyncio.create_task(self._pump())
        logger.info(f"Started content watcher for {len(self.directories)} directories")

    async def stop(self) -> None:
        if not self.is_running:
            return

        if self._handler:
            self._handler.close()

        try:
            self.observer.stop()
            self.observer.join(timeout=self.shutdown_timeout_s)
        except Exception as e:
            logger.warning(f"Error stopping observer: {e}")
        finally:
            self.observer = None

        tasks = list(self._inflight)
        if self._pump_task:
            tasks.append(self._pump_task)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._inflight.clear()
        self._pump_task = None
        self._handler = None
        self._queue = None
        logger.info("Stopped content watcher")

    async def _pump(self) -> None:
        """Drain the thread-fed queue, delivering each event in its own task"""
        while True:
            event = await self._queue.get()
            task = asyncio.create_task(self.emit(event))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)


class ContentEventHandler(FileSystemEventHandler):
    """
    Watchdog handler that forwards converted events to an asyncio queue.

    Runs on the observer thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue):
        super().__init__()
        self._loop: Optional[asyncio.AbstractEventLoop] = loop
        self._queue = queue

    def close(self) -> None:
        self._loop = None

    def on_any_event(self, event: WatchdogEvent) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug(f"No event loop available, dropping event: {event}")
            return

        for watch_event in convert_watchdog_event(event):
            try:
                loop.call_soon_threadsafe(self._queue.put_nowait, watch_event)
            except RuntimeError as e:
                # Loop closed between the check and the call
                logger.debug(f"Dropping event {watch_event}: {e}")
                return

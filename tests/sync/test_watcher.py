"""
Tests for content watchers and watchdog event conversion.

Validates conversion of watchdog events to typed WatchEvents, subscriber
delivery and error isolation, and the live watchdog-backed watcher.
"""

import asyncio
import shutil
import tempfile
from pathlib import Path

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from content_sync.sync.events import WatchEvent, WatchEventKind
from content_sync.sync.watcher import (
    ContentWatcher,
    WatchdogContentWatcher,
    convert_watchdog_event,
)

BASE_TIMEOUT = 5.0


class RecordingWatcher(ContentWatcher):
    """Minimal watcher that records scheduled directories"""

    def __init__(self):
        super().__init__()
        self.scheduled = []

    def _watch(self, directory: Path) -> None:
        self.scheduled.append(directory)

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass


class TestWatchEvent:

    def test_factories(self):
        path = Path("/c/a.md")

        assert WatchEvent.add(path).kind == WatchEventKind.ADD
        assert WatchEvent.change(path).kind == WatchEventKind.CHANGE
        assert WatchEvent.unlink(path).is_removal
        assert str(WatchEvent.add(path)) == "ADD: /c/a.md"

    def test_relative_path_rejected(self):
        with pytest.raises(ValueError):
            WatchEvent.add(Path("relative/a.md"))

    def test_to_dict(self):
        data = WatchEvent.change(Path("/c/a.md")).to_dict()

        assert data["kind"] == "change"
        assert data["path"] == "/c/a.md"


class TestConvertWatchdogEvent:

    def test_created(self):
        events = convert_watchdog_event(FileCreatedEvent("/c/a.md"))

        assert [(e.kind, e.path) for e in events] == [(WatchEventKind.ADD, Path("/c/a.md"))]

    def test_modified(self):
        events = convert_watchdog_event(FileModifiedEvent("/c/a.md"))

        assert [e.kind for e in events] == [WatchEventKind.CHANGE]

    def test_deleted(self):
        events = convert_watchdog_event(FileDeletedEvent("/c/a.md"))

        assert [e.kind for e in events] == [WatchEventKind.UNLINK]

    def test_moved_is_unlink_then_add(self):
        events = convert_watchdog_event(FileMovedEvent("/c/a.md", "/c/b.md"))

        assert [(e.kind, e.path) for e in events] == [
            (WatchEventKind.UNLINK, Path("/c/a.md")),
            (WatchEventKind.ADD, Path("/c/b.md")),
        ]

    def test_directory_events_dropped(self):
        assert convert_watchdog_event(DirCreatedEvent("/c/posts")) == []

    def test_unmapped_events_dropped(self):
        assert convert_watchdog_event(FileClosedEvent("/c/a.md")) == []


class TestContentWatcher:

    def test_add_deduplicates(self):
        watcher = RecordingWatcher()

        watcher.add(Path("/c"))
        watcher.add(Path("/c"))

        assert watcher.directories == [Path("/c")]
        assert watcher.scheduled == [Path("/c")]

    @pytest.mark.asyncio
    async def test_failing_subscriber_isolated(self):
        watcher = RecordingWatcher()
        received = []

        async def failing(event):
            raise RuntimeError("subscriber failed")

        async def recording(event):
            received.append(event)

        watcher.subscribe(failing)
        watcher.subscribe(recording)
        event = WatchEvent.change(Path("/c/a.md"))

        await watcher.emit(event)

        assert received == [event]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        watcher = RecordingWatcher()
        received = []

        async def recording(event):
            received.append(event)

        unsubscribe = watcher.subscribe(recording)
        unsubscribe()
        unsubscribe()
        await watcher.emit(WatchEvent.change(Path("/c/a.md")))

        assert received == []


class TestWatchdogContentWatcher:

    @pytest.fixture
    def watch_dir(self):
        temp_dir = Path(tempfile.mkdtemp()).resolve()
        yield temp_dir
        shutil.rmtree(temp_dir, ignore_errors=True)

    @pytest.mark.asyncio
    async def test_start_stop(self, watch_dir):
        watcher = WatchdogContentWatcher()
        watcher.add(watch_dir)

        await watcher.start()
        assert watcher.is_running

        await watcher.stop()
        assert not watcher.is_running

        # Stopping twice is harmless
        await watcher.stop()

    @pytest.mark.asyncio
    async def test_delivers_file_events(self, watch_dir):
        received = []
        got_event = asyncio.Event()

        async def on_event(event):
            received.append(event)
            got_event.set()

        async with WatchdogContentWatcher() as watcher:
            watcher.subscribe(on_event)
            watcher.add(watch_dir)

            (watch_dir / "a.md").write_text("hello")

            await asyncio.wait_for(got_event.wait(), timeout=BASE_TIMEOUT)

        assert any(e.path == watch_dir / "a.md" for e in received)
        assert all(e.path.is_absolute() for e in received)

"""
Tests for WatchEventRouter dispatching watch events to the engine.
"""

import logging
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from content_sync.models.results import FileSyncResult, SyncOutcome
from content_sync.sync.events import WatchEvent
from content_sync.sync.router import WatchEventRouter
from content_sync.sync.watcher import ContentWatcher

BASE = Path("/project/src/content")
TRACKED = BASE / "about.md"


class FakeWatcher(ContentWatcher):
    """Watcher driven by hand from tests"""

    def __init__(self):
        super().__init__()
        self.running = False

    @property
    def is_running(self) -> bool:
        return self.running

    async def start(self) -> None:
        self.running = True

    async def stop(self) -> None:
        self.running = False


class TestWatchEventRouter:

    @pytest.fixture
    def engine(self):
        engine = Mock()
        engine.provider.paths = [TRACKED]
        engine.on_change = AsyncMock(return_value=FileSyncResult(path=TRACKED, outcome=SyncOutcome.UPDATED))
        engine.on_unlink = AsyncMock(return_value=FileSyncResult(path=TRACKED, outcome=SyncOutcome.REMOVED))
        return engine

    @pytest.fixture
    def router(self, engine):
        return WatchEventRouter(engine)

    @pytest.mark.asyncio
    async def test_add_and_change_resync(self, router, engine):
        await router.dispatch(WatchEvent.add(TRACKED))
        await router.dispatch(WatchEvent.change(TRACKED))

        assert engine.on_change.await_count == 2
        engine.on_change.assert_awaited_with(TRACKED)
        assert router.events_routed == 2

    @pytest.mark.asyncio
    async def test_unlink_removes(self, router, engine):
        result = await router.dispatch(WatchEvent.unlink(TRACKED))

        engine.on_unlink.assert_awaited_once_with(TRACKED)
        assert result.outcome == SyncOutcome.REMOVED

    @pytest.mark.asyncio
    async def test_untracked_paths_ignored(self, router, engine):
        """Files created after startup are not part of the module source"""
        result = await router.dispatch(WatchEvent.add(BASE / "new.md"))

        assert result is None
        engine.on_change.assert_not_awaited()
        assert router.events_ignored == 1

    def test_explicit_tracked_paths(self, engine):
        router = WatchEventRouter(engine, tracked_paths=[BASE / "other.md"])

        assert router.is_tracked(BASE / "other.md")
        assert not router.is_tracked(TRACKED)

    @pytest.mark.asyncio
    async def test_attach_routes_emitted_events(self, router, engine):
        watcher = FakeWatcher()
        router.attach(watcher)

        await watcher.emit(WatchEvent.change(TRACKED))

        engine.on_change.assert_awaited_once_with(TRACKED)

    @pytest.mark.asyncio
    async def test_detach_stops_routing(self, router, engine):
        watcher = FakeWatcher()
        router.attach(watcher)
        router.detach()

        await watcher.emit(WatchEvent.change(TRACKED))

        engine.on_change.assert_not_awaited()

    def test_attach_twice_rejected(self, router):
        router.attach(FakeWatcher())

        with pytest.raises(RuntimeError):
            router.attach(FakeWatcher())

    @pytest.mark.asyncio
    async def test_routed_events_logged(self, router, caplog):
        with caplog.at_level(logging.DEBUG, logger="content_sync.sync.router"):
            await router.dispatch(WatchEvent.unlink(TRACKED))

        assert "'kind': 'unlink'" in caplog.text
        assert str(TRACKED) in caplog.text

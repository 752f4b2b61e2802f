"""
Tests for FileIdentityIndex path -> id bookkeeping.
"""

import threading
from pathlib import Path

from content_sync.sync.identity import FileIdentityIndex


class TestFileIdentityIndex:

    def test_set_and_get(self):
        index = FileIdentityIndex()

        assert index.set(Path("/c/a.md"), "a") is None
        assert index.get(Path("/c/a.md")) == "a"
        assert index.get("/c/a.md") == "a"
        assert Path("/c/a.md") in index
        assert len(index) == 1

    def test_set_returns_previous(self):
        index = FileIdentityIndex()
        index.set(Path("/c/a.md"), "old")

        assert index.set(Path("/c/a.md"), "new") == "old"
        assert index.get(Path("/c/a.md")) == "new"

    def test_pop(self):
        index = FileIdentityIndex()
        index.set(Path("/c/a.md"), "a")

        assert index.pop(Path("/c/a.md")) == "a"
        assert index.pop(Path("/c/a.md")) is None
        assert Path("/c/a.md") not in index

    def test_paths_for_reports_collisions(self):
        index = FileIdentityIndex()
        index.set(Path("/c/a.md"), "same")
        index.set(Path("/c/b.md"), "same")
        index.set(Path("/c/c.md"), "other")

        assert sorted(index.paths_for("same")) == [Path("/c/a.md"), Path("/c/b.md")]

    def test_snapshot_is_a_copy(self):
        index = FileIdentityIndex()
        index.set(Path("/c/a.md"), "a")

        snapshot = index.snapshot()
        index.clear()

        assert snapshot == {Path("/c/a.md"): "a"}
        assert len(index) == 0

    def test_non_path_membership(self):
        assert 42 not in FileIdentityIndex()

    def test_concurrent_writers(self):
        index = FileIdentityIndex()

        def writer(offset: int):
            for i in range(200):
                index.set(Path(f"/c/{offset}-{i}.md"), f"{offset}-{i}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(index) == 800

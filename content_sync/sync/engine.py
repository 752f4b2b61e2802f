"""
Content Synchronization Engine.

Keeps the content store consistent with the tracked source files: bulk
synchronization at startup with digest-based change detection, and
per-file resync/removal while watching.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from ..models.entries import ContentModule, RenderedContent, StoreRecord
from ..models.results import FileSyncResult, SyncOutcome, SyncReport
from .collaborators import (
    CallableRenderer,
    Digester,
    PassthroughValidator,
    Renderer,
    Sha256Digester,
    Validator,
    maybe_await,
    serialize_module,
)
from .errors import EntryValidationError, PerFileError, RenderError, StoreWriteError
from .identifiers import GenerateId, IdentifierGenerator
from .identity import FileIdentityIndex
from .paths import posix_relative
from .providers import ModuleProvider

logger = logging.getLogger(__name__)


@dataclass
class SyncEngineMetrics:
    """Counters accumulated over the engine's lifetime."""

    files_written: int = 0
    files_unchanged: int = 0
    files_failed: int = 0
    records_renamed: int = 0
    records_removed: int = 0
    bulk_passes: int = 0
    last_error_message: Optional[str] = None
    last_error_time: Optional[datetime] = None


class SyncEngine:
    """
    Synchronizes tracked source files into a content store.

    Per file the pipeline is strictly sequential: load, derive the id,
    digest, validate, render, write. Different files run concurrently and
    one file's failure never affects another's. The engine is the only
    writer of the FileIdentityIndex and holds no lock across awaits, so
    overlapping notifications for the same path may race (last write wins).
    """

    def __init__(
        self,
        provider: ModuleProvider,
        store: Any,
        base_dir: Union[str, Path],
        project_root: Union[str, Path],
        generate_id: Optional[Union[GenerateId, IdentifierGenerator]] = None,
        digester: Optional[Digester] = None,
        validator: Optional[Validator] = None,
        renderer: Optional[Renderer] = None,
        index: Optional[FileIdentityIndex] = None,
        max_concurrency: int = 0
    ):
        """
        Initialize the synchronization engine.

        Args:
            provider: Source of tracked modules
            store: Content store (``get``/``set``/``delete``, sync or async)
            base_dir: Absolute base directory entry paths are relative to
            project_root: Root that stored file paths are relative to
            generate_id: Id strategy override; defaults to path slugs
            digester: Fingerprint of serialized modules
            validator: Schema validation step for entry data
            renderer: Renders module bodies to their output string
            index: Identity index to populate (a fresh one by default)
            max_concurrency: Limit on files processed at once in a bulk pass (0 = unbounded)
        """
        self.provider = provider
        self.store = store
        self.base_dir = Path(base_dir)
        self.project_root = Path(project_root)

        if isinstance(generate_id, IdentifierGenerator):
            self.identifiers = generate_id
        else:
            self.identifiers = IdentifierGenerator(generate_id)

        self.digester = digester or Sha256Digester()
        self.validator = validator or PassthroughValidator()
        self.renderer = renderer or CallableRenderer()
        self.index = index if index is not None else FileIdentityIndex()
        self.max_concurrency = max_concurrency

        # Set once the first bulk pass has fully completed, store writes included
        self.ready = asyncio.Event()
        self.metrics = SyncEngineMetrics()

    def entry_path(self, path: Path) -> str:
        """Path of ``path`` relative to the base directory, forward-slashed"""
        return posix_relative(self.base_dir, path)

    def stored_path(self, path: Path) -> str:
        """Path of ``path`` relative to the project root, forward-slashed"""
        return posix_relative(self.project_root, path)

    async def bulk_sync(self, paths: Optional[Iterable[Path]] = None) -> SyncReport:
        """
        Synchronize every tracked file, skipping unchanged ones.

        A file is unchanged when the store already holds a record under its
        id with the same digest and a recorded file path; it is then only
        re-registered in the identity index. All files run concurrently and
        this returns only after every one of them has finished.

        Args:
            paths: Subset of tracked paths to sync (all by default)

        Returns:
            SyncReport with one result per file
        """
        paths = list(self.provider.paths if paths is None else paths)
        report = SyncReport(base_dir=self.base_dir)

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency > 0 else None

        async def run(path: Path) -> FileSyncResult:
            if semaphore is None:
                return await self._sync_initial(path)
            async with semaphore:
                return await self._sync_initial(path)

        logger.info(f"Synchronizing {len(paths)} files from {self.base_dir}")
        results = await asyncio.gather(*(run(Path(p)) for p in paths))

        for result in results:
            report.add(result)
        report.complete()

        self.metrics.bulk_passes += 1
        self.ready.set()

        logger.info(
            f"Synchronized {len(paths)} files in {report.duration_seconds:.2f}s: "
            f"{report.count(SyncOutcome.CREATED) + report.count(SyncOutcome.UPDATED)} written, "
            f"{report.count(SyncOutcome.UNCHANGED)} unchanged, "
            f"{len(report.failed)} failed"
        )
        return report

    async def on_change(self, path: Union[str, Path]) -> FileSyncResult:
        """
        Resynchronize one file after an add or change notification.

        Always runs the full pipeline. If the regenerated id differs from the
        one previously recorded for ``path``, the stale record is deleted
        first. The identity index is updated only after the write succeeds.
        """
        path = Path(path)
        start_time = datetime.now()
        entry = self.entry_path(path)
        old_id = self.index.get(path)
        entry_id: Optional[str] = None

        try:
            module = await self.provider.load(path)
            entry_id = self._generate_id(path, entry, module)
            await self._retire_previous_id(path, entry, old_id, entry_id)

            digest = await self._digest(path, entry, entry_id, module)
            existing = await self._store_get(path, entry, entry_id)
            await self._run_pipeline(path, entry, entry_id, module, digest)
            self.index.set(path, entry_id)

        except PerFileError as e:
            return self._failed(path, entry, entry_id or old_id, e, start_time, previous_id=old_id)

        if old_id and old_id != entry_id:
            outcome = SyncOutcome.RENAMED
            self.metrics.records_renamed += 1
        elif existing is None:
            outcome = SyncOutcome.CREATED
        else:
            outcome = SyncOutcome.UPDATED
        self.metrics.files_written += 1

        logger.info(f"Reloaded data from {entry}")
        return FileSyncResult(
            path=path,
            outcome=outcome,
            entry=entry,
            entry_id=entry_id,
            previous_id=old_id,
            duration_ms=self._elapsed_ms(start_time)
        )

    async def on_unlink(self, path: Union[str, Path]) -> FileSyncResult:
        """
        Remove the record of a deleted file.

        A path that was never synced (or was already removed) is a no-op.
        """
        path = Path(path)
        start_time = datetime.now()
        entry = self.entry_path(path)
        entry_id = self.index.get(path)

        if entry_id is None:
            logger.debug(f"Ignoring unlink of unsynced file {entry}")
            return FileSyncResult(path=path, outcome=SyncOutcome.SKIPPED, entry=entry)

        try:
            await self._store_delete(path, entry, entry_id)
        except PerFileError as e:
            return self._failed(path, entry, entry_id, e, start_time)

        self.index.pop(path)
        self.metrics.records_removed += 1
        logger.info(f"Removed entry {entry_id} ({entry})")

        return FileSyncResult(
            path=path,
            outcome=SyncOutcome.REMOVED,
            entry=entry,
            entry_id=entry_id,
            duration_ms=self._elapsed_ms(start_time)
        )

    async def _sync_initial(self, path: Path) -> FileSyncResult:
        """
        Bulk-pass handling of one file, with the digest short-circuit.

        On a repeated pass the identity index already knows the file, so an
        id change is handled as a rename exactly like ``on_change`` does.
        """
        start_time = datetime.now()
        entry = self.entry_path(path)
        old_id = self.index.get(path)
        entry_id: Optional[str] = None

        try:
            module = await self.provider.load(path)
            entry_id = self._generate_id(path, entry, module)
            renamed = await self._retire_previous_id(path, entry, old_id, entry_id)
            digest = await self._digest(path, entry, entry_id, module)
            existing = await self._store_get(path, entry, entry_id)

            if existing is not None and existing.digest == digest and existing.file_path:
                self.index.set(path, entry_id)
                self.metrics.files_unchanged += 1
                logger.debug(f"Skipping unchanged entry {entry_id} ({entry})")
                return FileSyncResult(
                    path=path,
                    outcome=SyncOutcome.UNCHANGED,
                    entry=entry,
                    entry_id=entry_id,
                    previous_id=old_id,
                    duration_ms=self._elapsed_ms(start_time)
                )

            await self._run_pipeline(path, entry, entry_id, module, digest)
            self.index.set(path, entry_id)

        except PerFileError as e:
            return self._failed(path, entry, entry_id or old_id, e, start_time, previous_id=old_id)

        if renamed:
            outcome = SyncOutcome.RENAMED
            self.metrics.records_renamed += 1
        elif existing is None:
            outcome = SyncOutcome.CREATED
        else:
            outcome = SyncOutcome.UPDATED
        self.metrics.files_written += 1

        return FileSyncResult(
            path=path,
            outcome=outcome,
            entry=entry,
            entry_id=entry_id,
            previous_id=old_id,
            duration_ms=self._elapsed_ms(start_time)
        )

    async def _retire_previous_id(
        self,
        path: Path,
        entry: str,
        old_id: Optional[str],
        entry_id: str
    ) -> bool:
        """Delete the record stored under a stale id; True if there was one"""
        if not old_id or old_id == entry_id:
            return False
        await self._store_delete(path, entry, old_id)
        logger.info(f"Entry {entry} moved from id {old_id} to {entry_id}")
        return True

    async def _run_pipeline(
        self,
        path: Path,
        entry: str,
        entry_id: str,
        module: ContentModule,
        digest: str
    ) -> StoreRecord:
        """Validate, render and write one entry"""
        data: Dict[str, Any] = dict(module.meta or {})

        try:
            validated = await maybe_await(self.validator.validate({
                "id": entry_id,
                "data": data,
                "source_path": str(path),
            }))
            if validated is not None:
                if not isinstance(validated, Mapping):
                    raise TypeError(
                        f"validator returned {type(validated).__name__}, expected a mapping"
                    )
                data = dict(validated)
        except PerFileError:
            raise
        except Exception as e:
            raise EntryValidationError(path, str(e), entry=entry, entry_id=entry_id) from e

        try:
            html = await maybe_await(self.renderer.render(module.body))
        except Exception as e:
            raise RenderError(path, str(e), entry=entry, entry_id=entry_id) from e

        try:
            record = StoreRecord(
                id=entry_id,
                data=data,
                rendered=RenderedContent(html=html if isinstance(html, str) else str(html)),
                file_path=self.stored_path(path),
                digest=digest
            )
        except Exception as e:
            raise PerFileError(path, f"Failed to build record: {e}", entry=entry, entry_id=entry_id) from e

        try:
            await maybe_await(self.store.set(record))
        except Exception as e:
            raise StoreWriteError(path, f"Failed to write record: {e}", entry=entry, entry_id=entry_id) from e

        logger.debug(f"Stored entry {entry_id} ({entry})")
        return record

    def _generate_id(self, path: Path, entry: str, module: ContentModule) -> str:
        try:
            return self.identifiers.generate(entry, self.base_dir, module.meta)
        except Exception as e:
            raise PerFileError(path, f"Failed to generate id: {e}", entry=entry) from e

    async def _digest(self, path: Path, entry: str, entry_id: str, module: ContentModule) -> str:
        try:
            return await maybe_await(self.digester.digest(serialize_module(module)))
        except Exception as e:
            raise PerFileError(path, f"Failed to digest module: {e}", entry=entry, entry_id=entry_id) from e

    async def _store_get(self, path: Path, entry: str, entry_id: str) -> Optional[StoreRecord]:
        try:
            return await maybe_await(self.store.get(entry_id))
        except Exception as e:
            raise StoreWriteError(path, f"Failed to read record: {e}", entry=entry, entry_id=entry_id) from e

    async def _store_delete(self, path: Path, entry: str, entry_id: str) -> None:
        try:
            await maybe_await(self.store.delete(entry_id))
        except Exception as e:
            raise StoreWriteError(path, f"Failed to delete record: {e}", entry=entry, entry_id=entry_id) from e

    def _failed(
        self,
        path: Path,
        entry: str,
        entry_id: Optional[str],
        error: PerFileError,
        start_time: datetime,
        previous_id: Optional[str] = None
    ) -> FileSyncResult:
        if error.entry is None:
            error.entry = entry
        if error.entry_id is None:
            error.entry_id = entry_id

        self.metrics.files_failed += 1
        self.metrics.last_error_message = str(error)
        self.metrics.last_error_time = datetime.now()
        logger.error(f"Failed to sync {error}")

        return FileSyncResult(
            path=path,
            outcome=SyncOutcome.FAILED,
            entry=entry,
            entry_id=entry_id,
            previous_id=previous_id,
            error=error,
            duration_ms=self._elapsed_ms(start_time)
        )

    @staticmethod
    def _elapsed_ms(start_time: datetime) -> float:
        return (datetime.now() - start_time).total_seconds() * 1000

    def get_status(self) -> Dict[str, Any]:
        """Status information about the engine"""
        return {
            "ready": self.ready.is_set(),
            "base_dir": str(self.base_dir),
            "tracked_files": len(self.provider),
            "indexed_files": len(self.index),
            "files_written": self.metrics.files_written,
            "files_unchanged": self.metrics.files_unchanged,
            "files_failed": self.metrics.files_failed,
            "records_renamed": self.metrics.records_renamed,
            "records_removed": self.metrics.records_removed,
            "bulk_passes": self.metrics.bulk_passes,
            "last_error": self.metrics.last_error_message,
            "last_error_time": self.metrics.last_error_time.isoformat() if self.metrics.last_error_time else None,
        }

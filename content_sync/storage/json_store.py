"""
JSON file content store.

Persists records to a single JSON file so digests survive process restarts
and unchanged files are skipped on the next bulk pass.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import aiofiles

from ..models.entries import StoreRecord
from .base import ContentStore

logger = logging.getLogger(__name__)

STORE_FORMAT_VERSION = 1


class JsonFileContentStore(ContentStore):
    """
    Store backed by a JSON file, loaded lazily on first access.

    Mutations are written through a temporary file followed by an atomic
    replace and only become visible once that write has succeeded.
    Concurrent mutations are grouped so that each flush rewrites the file
    once; flushes are serialized with an asyncio lock.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._records: Dict[str, StoreRecord] = {}
        self._pending: Dict[str, Optional[StoreRecord]] = {}
        self._flush_task: Optional[asyncio.Task] = None
        self._loaded = False
        self._load_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return

        async with self._load_lock:
            if self._loaded:
                return

            if self.path.exists():
                try:
                    async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
                        content = await f.read()
                    raw_data = json.loads(content) if content.strip() else {}

                    for entry_id, record_dict in raw_data.get("records", {}).items():
                        try:
                            self._records[entry_id] = StoreRecord.from_dict(record_dict)
                        except Exception as e:
                            logger.warning(f"Invalid store record {entry_id}: {e}")

                    logger.info(f"Loaded {len(self._records)} records from {self.path}")

                except (OSError, json.JSONDecodeError) as e:
                    logger.warning(
                        f"Failed to load store file {self.path}: {e}. "
                        "Starting with an empty store."
                    )

            self._loaded = True

    async def _save(self, records: Dict[str, StoreRecord]) -> None:
        data = {
            "version": STORE_FORMAT_VERSION,
            "records": {
                entry_id: record.to_dict()
                for entry_id, record in records.items()
            }
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            async with aiofiles.open(temp_file, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(data, indent=2, ensure_ascii=False))
            os.replace(temp_file, self.path)
        finally:
            if temp_file.exists():
                temp_file.unlink()

        logger.debug(f"Saved {len(records)} records to {self.path}")

    async def _flush(self) -> None:
        """Write every pending change in one rewrite, then publish it"""
        async with self._write_lock:
            # Changes queued from here on belong to the next flush
            self._flush_task = None
            changes, self._pending = self._pending, {}

            records = dict(self._records)
            for entry_id, record in changes.items():
                if record is None:
                    records.pop(entry_id, None)
                else:
                    records[entry_id] = record

            await self._save(records)
            self._records = records

    async def _commit(self, entry_id: str, record: Optional[StoreRecord]) -> None:
        """
        Queue a change and wait until it is on disk.

        Changes queued while a flush is pending share that flush, so a burst
        of concurrent writes costs one file rewrite. If the rewrite fails,
        none of its changes become visible and every waiter gets the error.
        """
        self._pending[entry_id] = record
        if self._flush_task is None:
            self._flush_task = asyncio.create_task(self._flush())
        await asyncio.shield(self._flush_task)

    def _current(self, entry_id: str) -> Optional[StoreRecord]:
        if entry_id in self._pending:
            return self._pending[entry_id]
        return self._records.get(entry_id)

    async def get(self, entry_id: str) -> Optional[StoreRecord]:
        await self._ensure_loaded()
        return self._records.get(entry_id)

    async def set(self, record: StoreRecord) -> None:
        await self._ensure_loaded()
        await self._commit(record.id, record)

    async def delete(self, entry_id: str) -> bool:
        await self._ensure_loaded()
        if self._current(entry_id) is None:
            return False
        await self._commit(entry_id, None)
        return True

    async def keys(self) -> List[str]:
        await self._ensure_loaded()
        return list(self._records)

"""
Content store interface.

The store is the single source of truth for StoreRecords. Implementations
must support independent per-id get/set/delete; the sync engine holds no
lock across store calls.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.entries import StoreRecord


class ContentStore(ABC):
    """Abstract key-value store of processed entries, keyed by logical id"""

    @abstractmethod
    async def get(self, entry_id: str) -> Optional[StoreRecord]:
        """Record stored under ``entry_id``, or None"""

    @abstractmethod
    async def set(self, record: StoreRecord) -> None:
        """Insert or replace the record under ``record.id``"""

    @abstractmethod
    async def delete(self, entry_id: str) -> bool:
        """Delete the record under ``entry_id``; True if one existed"""

    @abstractmethod
    async def keys(self) -> List[str]:
        """All stored ids"""

    async def has(self, entry_id: str) -> bool:
        return await self.get(entry_id) is not None

    async def values(self) -> List[StoreRecord]:
        records = []
        for entry_id in await self.keys():
            record = await self.get(entry_id)
            if record is not None:
                records.append(record)
        return records

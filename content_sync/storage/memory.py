"""
In-memory content store.
"""

import logging
from typing import Dict, List, Optional

from ..models.entries import StoreRecord
from .base import ContentStore

logger = logging.getLogger(__name__)


class InMemoryContentStore(ContentStore):
    """Dict-backed store for tests and one-shot runs"""

    def __init__(self, records: Optional[Dict[str, StoreRecord]] = None):
        self._records: Dict[str, StoreRecord] = dict(records or {})

    async def get(self, entry_id: str) -> Optional[StoreRecord]:
        return self._records.get(entry_id)

    async def set(self, record: StoreRecord) -> None:
        if record.id in self._records:
            logger.debug(f"Replacing record {record.id}")
        self._records[record.id] = record

    async def delete(self, entry_id: str) -> bool:
        return self._records.pop(entry_id, None) is not None

    async def keys(self) -> List[str]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._records

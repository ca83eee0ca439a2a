from __future__ import annotations

import dataclasses
import threading
from typing import Dict, Iterable, List, Optional

from ..models import AssetRecord


class MemoryAssetStore:
    """Dict-backed store. Safe to share across threads and event loops."""

    def __init__(self, records: Optional[Iterable[AssetRecord]] = None) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, AssetRecord] = {}
        for record in records or ():
            self._records[record.id] = record

    async def insert(self, record: AssetRecord) -> None:
        with self._lock:
            self._records[record.id] = record

    async def find(self, record_id: str) -> Optional[AssetRecord]:
        with self._lock:
            return self._records.get(record_id)

    async def update(self, record_id: str, **fields) -> Optional[AssetRecord]:
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                return None
            updated = dataclasses.replace(current, **fields)
            self._records[record_id] = updated
            return updated

    async def remove(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    async def all(self) -> List[AssetRecord]:
        with self._lock:
            return sorted(self._records.values(), key=lambda r: r.id)

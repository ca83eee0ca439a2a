import asyncio
import dataclasses
import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, List, Optional

from ..models import AssetRecord
from ..schema import INDEX_SCHEMA_VERSION, build_index_structure

logger = logging.getLogger(__name__)


def save_json(path: Path, data: dict) -> None:
    """Write data to path atomically: readers see the old file or the new one."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=4)
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def load_json(path: Path) -> Optional[dict]:
    if not path.exists():
        return None

    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


class JsonAssetStore:
    """
    Asset index persisted as a single JSON document:

    {
        "schema_version": 1,
        "records": {
            "themes/landscape/style.css": {"id": ..., "path": ..., "modified": true},
            ...
        }
    }

    The file is loaded on first use and rewritten after every mutation.
    Blocking file I/O runs in a worker thread; a lock serializes access so
    every call is atomic for the record it touches.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._records: Optional[Dict[str, AssetRecord]] = None

    # ---- sync helpers (called with the lock held) --------------------------
    def _load(self) -> Dict[str, AssetRecord]:
        if self._records is None:
            data = load_json(self.path) or {}
            version = data.get("schema_version", INDEX_SCHEMA_VERSION)
            if version != INDEX_SCHEMA_VERSION:
                logger.warning(
                    "Index %s has schema version %s, expected %s",
                    self.path, version, INDEX_SCHEMA_VERSION,
                )
            raw = data.get("records", {})
            self._records = {k: AssetRecord.from_dict(v) for k, v in raw.items()}
        return self._records

    def _commit(self, records: Dict[str, AssetRecord]) -> None:
        """Persist records, then make them visible. A failed write leaves memory untouched."""
        save_json(
            self.path,
            build_index_structure({k: r.to_dict() for k, r in sorted(records.items())}),
        )
        self._records = records

    def _insert(self, record: AssetRecord) -> None:
        with self._lock:
            records = dict(self._load())
            records[record.id] = record
            self._commit(records)

    def _find(self, record_id: str) -> Optional[AssetRecord]:
        with self._lock:
            return self._load().get(record_id)

    def _update(self, record_id: str, fields: dict) -> Optional[AssetRecord]:
        with self._lock:
            current = self._load().get(record_id)
            if current is None:
                return None
            updated = dataclasses.replace(current, **fields)
            records = dict(self._records)
            records[record_id] = updated
            self._commit(records)
            return updated

    def _remove(self, record_id: str) -> bool:
        with self._lock:
            if record_id not in self._load():
                return False
            records = dict(self._records)
            del records[record_id]
            self._commit(records)
            return True

    def _all(self) -> List[AssetRecord]:
        with self._lock:
            return sorted(self._load().values(), key=lambda r: r.id)

    # ---- AssetStore --------------------------------------------------------
    async def insert(self, record: AssetRecord) -> None:
        await asyncio.to_thread(self._insert, record)

    async def find(self, record_id: str) -> Optional[AssetRecord]:
        return await asyncio.to_thread(self._find, record_id)

    async def update(self, record_id: str, **fields) -> Optional[AssetRecord]:
        return await asyncio.to_thread(self._update, record_id, fields)

    async def remove(self, record_id: str) -> bool:
        return await asyncio.to_thread(self._remove, record_id)

    async def all(self) -> List[AssetRecord]:
        return await asyncio.to_thread(self._all)

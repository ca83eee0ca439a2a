from __future__ import annotations

from typing import List, Optional, Protocol

from ..models import AssetRecord


class AssetStore(Protocol):
    """
    Keyed persistence for asset records.

    Each call touches a single record and is atomic for that record.
    Implementations raise their own I/O errors; nothing here retries.
    """

    async def insert(self, record: AssetRecord) -> None:
        """Insert record, replacing any record with the same id."""
        ...

    async def find(self, record_id: str) -> Optional[AssetRecord]:
        ...

    async def update(self, record_id: str, **fields) -> Optional[AssetRecord]:
        """Apply fields to an existing record. Returns None if it is absent."""
        ...

    async def remove(self, record_id: str) -> bool:
        """Remove a record. Returns False (not an error) if it was absent."""
        ...

    async def all(self) -> List[AssetRecord]:
        ...

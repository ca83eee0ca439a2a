"""
Reconciliation of the asset index with classified file events.

One event in, at most one store mutation out:

    create -> upsert {id, path, modified: True}
    update -> set modified=True on the record (upsert if it is absent)
    skip   -> nothing
    delete -> remove the record; an absent record is not an error

Store errors propagate unchanged; nothing here retries.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from .events import ChangeType, FileChangeEvent
from .models import AssetRecord, asset_id
from .storage.base import AssetStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DispatchResult:
    id: str
    type: ChangeType
    mutated: bool


DispatchOutcome = Union[DispatchResult, BaseException]


class Reconciler:
    def __init__(self, store: AssetStore, namespace: str) -> None:
        self.store = store
        self.namespace = namespace

    async def dispatch(self, event: FileChangeEvent) -> DispatchResult:
        change = ChangeType.parse(event.type)
        record_id = asset_id(self.namespace, event.asset_path)

        if change is ChangeType.CREATE:
            await self._upsert_modified(record_id, event.asset_path)
            mutated = True
        elif change is ChangeType.UPDATE:
            updated = await self.store.update(record_id, modified=True)
            if updated is None:
                await self._upsert_modified(record_id, event.asset_path)
            mutated = True
        elif change is ChangeType.SKIP:
            mutated = False
        else:
            mutated = await self.store.remove(record_id)

        logger.debug("%s %s (mutated=%s)", change.value, record_id, mutated)
        return DispatchResult(id=record_id, type=change, mutated=mutated)

    async def _upsert_modified(self, record_id: str, asset_path: str) -> None:
        await self.store.insert(AssetRecord(id=record_id, path=asset_path, modified=True))

    async def dispatch_all(self, events: Iterable[FileChangeEvent]) -> List[DispatchOutcome]:
        """
        Dispatch every event concurrently. The returned list is in input order
        and holds either a DispatchResult or the exception that event raised.
        """
        tasks = [asyncio.create_task(self.dispatch(ev)) for ev in events]
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks, return_exceptions=True))


@dataclass
class BatchReport:
    counts: Dict[ChangeType, int] = field(default_factory=lambda: {t: 0 for t in ChangeType})
    failures: List[Tuple[str, BaseException]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_paths(self) -> List[str]:
        return [raw_path for raw_path, _ in self.failures]

    @classmethod
    def from_results(
        cls,
        events: Sequence[FileChangeEvent],
        results: Sequence[DispatchOutcome],
    ) -> "BatchReport":
        report = cls()
        for event, result in zip(events, results):
            if isinstance(result, BaseException):
                logger.warning("Failed to reconcile %s: %s", event.raw_path, result)
                report.failures.append((event.raw_path, result))
            else:
                report.counts[result.type] += 1
        return report

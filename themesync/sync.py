"""
Full rescan of a theme: scan source/, classify against the hash cache,
reconcile the asset index, then persist the new cache.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .comparator import build_events, classify_changes
from .dispatcher import BatchReport, Reconciler
from .events import ChangeType
from .scanner import scan_theme
from .storage.base import AssetStore
from .storage.cache import load_cache, save_cache

logger = logging.getLogger(__name__)


async def sync_theme(
    theme_dir: Path,
    store: AssetStore,
    cache_path: Path,
    namespace: str,
    exclude: Optional[List[str]] = None,
) -> BatchReport:
    theme_dir = Path(theme_dir).resolve()
    old_files = load_cache(cache_path)

    logger.info("Scanning %s", theme_dir)
    new_files = scan_theme(theme_dir, exclude=exclude)
    changes = classify_changes(old_files, new_files)
    events = build_events(theme_dir, changes)

    reconciler = Reconciler(store, namespace)
    results = await reconciler.dispatch_all(events)
    report = BatchReport.from_results(events, results)

    # Failed paths keep their previous cache state so the next scan retries them.
    cache = dict(new_files)
    for raw_path in report.failed_paths:
        if raw_path in old_files:
            cache[raw_path] = old_files[raw_path]
        else:
            cache.pop(raw_path, None)
    save_cache(cache_path, str(theme_dir), cache)

    logger.info(
        "Synced %s: %d created, %d updated, %d deleted, %d unchanged, %d failed",
        namespace,
        report.counts[ChangeType.CREATE],
        report.counts[ChangeType.UPDATE],
        report.counts[ChangeType.DELETE],
        report.counts[ChangeType.SKIP],
        len(report.failures),
    )
    return report

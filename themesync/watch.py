"""
Real-time watch mode built on top of watchdog.
Watch mode is an interrupt-driven version of scan: each filesystem event on a
theme asset becomes one classified FileChangeEvent and one dispatch.

Design principles:
1. One event = one decision: create / update / skip / delete for one asset
2. Debounced per path: always evaluate the latest filesystem state
3. Idempotent: same event twice -> same index state (delete of a missing record is a no-op)
"""
from __future__ import annotations

import asyncio
import logging
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .dispatcher import DispatchResult, Reconciler
from .events import ChangeType, FileChangeEvent
from .matcher import match, to_raw_path
from .scanner import _matches_exclude_patterns, build_file_meta
from .storage.cache import save_cache

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 600


@dataclass(frozen=True)
class CompareResult:
    """
    Output of single-file comparator.

    - change_type: create/update/skip/delete, or None when the file is unreadable
    - meta: computed metadata (hash/size/mtime) when available
    - unreadable: True when file couldn't be read/hashed; caller may retry once
    """

    change_type: Optional[ChangeType]
    meta: Optional[dict] = None
    unreadable: bool = False


@dataclass(frozen=True)
class NormalizedEvent:
    """
    Normalized event that watch mode processes.
    MOVED is normalized to DELETE + CREATE elsewhere.
    """

    kind: str  # "created" | "modified" | "deleted"
    abs_path: Path


def normalize_event(kind: str, src_path: str, dest_path: Optional[str] = None) -> List[NormalizedEvent]:
    """
    Normalize noisy watchdog events.

    Raw event -> normalized:
    - moved -> deleted(src) + created(dest)
    - created -> created
    - modified -> modified
    - deleted -> deleted
    """
    k = kind.lower().strip()
    if k == "moved":
        if dest_path is None:
            return [NormalizedEvent(kind="deleted", abs_path=Path(src_path))]
        return [
            NormalizedEvent(kind="deleted", abs_path=Path(src_path)),
            NormalizedEvent(kind="created", abs_path=Path(dest_path)),
        ]
    if k in ("created", "modified", "deleted"):
        return [NormalizedEvent(kind=k, abs_path=Path(src_path))]
    return []


def compare_file(abs_path: Path, cache_entry: Optional[dict]) -> CompareResult:
    """
    Single-file comparator: current file state vs. the hash cache.

    Rules:
    - create -> not in cache, exists now (readable)
    - update -> in cache, exists now, hash mismatch
    - skip   -> in cache, hash matches
    - delete -> missing now (cached or not; deleting an absent record is harmless)
    - None   -> exists but unreadable (caller may retry once)
    """
    meta, unreadable = build_file_meta(abs_path)

    if meta is None and not unreadable:
        return CompareResult(change_type=ChangeType.DELETE)

    if meta is None:
        return CompareResult(change_type=None, unreadable=True)

    if cache_entry is None:
        return CompareResult(change_type=ChangeType.CREATE, meta=meta)

    if cache_entry.get("hash") != meta.get("hash"):
        return CompareResult(change_type=ChangeType.UPDATE, meta=meta)

    return CompareResult(change_type=ChangeType.SKIP, meta=meta)


class WatchHandler(FileSystemEventHandler):
    """
    watchdog handler that reconciles the asset index for each asset event.
    The hash cache is updated in memory after every successful dispatch.
    """

    def __init__(
        self,
        theme_dir: Path,
        reconciler: Reconciler,
        cache: Dict[str, dict],
        exclude: Optional[List[str]] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self.theme_dir = theme_dir.resolve()
        self.reconciler = reconciler
        self.cache = cache
        self.exclude = exclude or []

        # per-path debounce state
        self.debounce_seconds = max(0.0, debounce_ms / 1000.0)
        self._lock = threading.Lock()
        self._timers: Dict[str, threading.Timer] = {}
        self._pending: Dict[str, Path] = {}  # raw_path -> last abs_path to evaluate
        self._retry_once: Dict[str, bool] = {}  # raw_path -> whether we've retried already

    # ---- helpers ---------------------------------------------------------
    def _raw_path(self, absolute: str) -> Optional[str]:
        """Convert absolute path to a raw path relative to the theme root."""
        try:
            rel = Path(absolute).resolve().relative_to(self.theme_dir)
        except ValueError:
            return None
        return to_raw_path(rel)

    def _should_ignore(self, raw_path: str) -> bool:
        if _matches_exclude_patterns(raw_path, self.exclude):
            return True
        return not match(raw_path).accepted

    def snapshot_cache(self) -> Dict[str, dict]:
        with self._lock:
            return dict(self.cache)

    def cancel_pending(self) -> None:
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            self._pending.clear()

    # ---- debounce + evaluation ------------------------------------------
    def _schedule_evaluation(self, raw_path: str, abs_path: Path) -> None:
        with self._lock:
            self._pending[raw_path] = abs_path
            t = self._timers.get(raw_path)
            if t is not None:
                t.cancel()
            timer = threading.Timer(self.debounce_seconds, self._flush_one, args=(raw_path,))
            timer.daemon = True
            self._timers[raw_path] = timer
            timer.start()

    def _flush_one(self, raw_path: str) -> None:
        with self._lock:
            abs_path = self._pending.pop(raw_path, None)
            self._timers.pop(raw_path, None)

        if abs_path is None:
            return

        try:
            self.evaluate(raw_path, abs_path)
        except Exception:
            # one failed asset must not stop the watcher; the next event or scan retries it
            logger.exception("Failed to reconcile %s", raw_path)

    def evaluate(self, raw_path: str, abs_path: Path) -> Optional[DispatchResult]:
        """
        Classify the latest state of one asset and dispatch it.
        Returns None when nothing was dispatched (unreadable file awaiting retry).
        """
        with self._lock:
            cache_entry = self.cache.get(raw_path)
        result = compare_file(abs_path, cache_entry)

        if result.unreadable:
            do_retry = False
            with self._lock:
                if not self._retry_once.get(raw_path, False):
                    self._retry_once[raw_path] = True
                    do_retry = True
            if do_retry:
                self._schedule_evaluation(raw_path, abs_path)
            else:
                logger.warning("Giving up on unreadable %s", raw_path)
            return None

        with self._lock:
            self._retry_once.pop(raw_path, None)

        event = FileChangeEvent.from_raw(result.change_type, raw_path, str(abs_path))
        if event is None:
            return None

        dispatched = asyncio.run(self.reconciler.dispatch(event))

        with self._lock:
            if result.change_type is ChangeType.DELETE:
                self.cache.pop(raw_path, None)
            elif result.meta is not None:
                self.cache[raw_path] = result.meta

        if dispatched.type is not ChangeType.SKIP:
            logger.info("[%s] %s", dispatched.type.value.upper(), event.asset_path)
        return dispatched

    # ---- event processors ------------------------------------------------
    def _handle(self, kind: str, src_path: str, dest_path: Optional[str] = None) -> None:
        for ne in normalize_event(kind, src_path, dest_path):
            raw_path = self._raw_path(str(ne.abs_path))
            if raw_path is None or self._should_ignore(raw_path):
                continue
            self._schedule_evaluation(raw_path, ne.abs_path)

    def _cached_under(self, abs_dir: str) -> List[str]:
        """Cached raw paths that lived under abs_dir."""
        raw_dir = self._raw_path(abs_dir)
        if raw_dir is None:
            return []
        prefix = f"{raw_dir}/" if raw_dir else ""
        with self._lock:
            return sorted(p for p in self.cache if p.startswith(prefix))

    def _handle_directory(self, kind: str, src_path: str, dest_path: Optional[str] = None) -> None:
        """
        Backends report a removed or renamed directory as one event, so expand it:
        - deleted/moved: every cached file under the old directory is re-evaluated (-> delete)
        - created/moved: every file now under the new directory is re-evaluated (-> create/update)
        """
        if kind in ("deleted", "moved"):
            for raw_path in self._cached_under(src_path):
                self._handle("deleted", str(self.theme_dir / raw_path))

        new_dir = dest_path if kind == "moved" else src_path if kind == "created" else None
        if new_dir is None:
            return
        for root, _dirs, files in os.walk(new_dir):
            for filename in files:
                self._handle("created", os.path.join(root, filename))

    def on_created(self, event: Union[FileCreatedEvent, DirCreatedEvent]) -> None:
        if event.is_directory:
            self._handle_directory("created", event.src_path)
            return
        self._handle("created", event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if event.is_directory:
            return
        self._handle("modified", event.src_path)

    def on_deleted(self, event: Union[FileDeletedEvent, DirDeletedEvent]) -> None:
        if event.is_directory:
            self._handle_directory("deleted", event.src_path)
            return
        self._handle("deleted", event.src_path)

    def on_moved(self, event: Union[FileMovedEvent, DirMovedEvent]) -> None:
        if event.is_directory:
            self._handle_directory("moved", event.src_path, event.dest_path)
            return
        self._handle("moved", event.src_path, event.dest_path)


def _build_observer(use_polling: bool = False) -> Observer:
    """
    Create a watchdog observer. PollingObserver is slower but more compatible
    across filesystems; used as a fallback when requested.
    """
    if use_polling:
        return PollingObserver()
    return Observer()


def watch(
    theme_dir: Path,
    reconciler: Reconciler,
    cache: Dict[str, dict],
    cache_path: Path,
    exclude: Optional[List[str]] = None,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    use_polling: bool = False,
) -> None:
    """
    Start a foreground watch loop. Blocks until KeyboardInterrupt,
    then saves the hash cache.
    """
    handler = WatchHandler(theme_dir, reconciler, cache, exclude, debounce_ms)
    observer = _build_observer(use_polling)
    observer.schedule(handler, str(handler.theme_dir), recursive=True)
    observer.start()

    print(f"Watching {handler.theme_dir} for changes... (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("Stopping watcher...")
    finally:
        observer.stop()
        observer.join()
        handler.cancel_pending()
        save_cache(cache_path, str(handler.theme_dir), handler.snapshot_cache())

from pathlib import Path
from typing import Dict, List

from .events import ChangeType, FileChangeEvent


def classify_changes(old_files: Dict[str, dict], new_files: Dict[str, dict]) -> Dict[ChangeType, List[str]]:
    """
    Compares the hash cache with a fresh scan.
    Every path lands in exactly one bucket: create, update, skip or delete.
    """
    changes: Dict[ChangeType, List[str]] = {t: [] for t in ChangeType}

    for path, old_meta in old_files.items():
        if path not in new_files:
            changes[ChangeType.DELETE].append(path)
        elif old_meta.get("hash") != new_files[path].get("hash"):
            changes[ChangeType.UPDATE].append(path)
        else:
            changes[ChangeType.SKIP].append(path)

    for path in new_files:
        if path not in old_files:
            changes[ChangeType.CREATE].append(path)

    for paths in changes.values():
        paths.sort()
    return changes


def build_events(theme_dir: Path, changes: Dict[ChangeType, List[str]]) -> List[FileChangeEvent]:
    """Turn classified raw paths into events, dropping paths that are not assets."""
    theme_dir = theme_dir.resolve()
    events: List[FileChangeEvent] = []
    for change_type, paths in changes.items():
        for raw_path in paths:
            event = FileChangeEvent.from_raw(change_type, raw_path, str(theme_dir / raw_path))
            if event is not None:
                events.append(event)
    return events

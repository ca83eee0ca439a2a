import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from fnmatch import fnmatch

from .hasher import hash_file
from .matcher import SOURCE_PREFIX, to_raw_path

logger = logging.getLogger(__name__)


def _matches_exclude_patterns(rel_path: str, patterns: List[str]) -> bool:
    """
    Return True if rel_path should be excluded according to patterns.
    Supports simple glob patterns (fnmatch) and negation with leading '!'.
    Rules:
      - Patterns are checked in order. A matching positive pattern excludes the path.
      - If a later negation pattern ('!pattern') matches, the path is included again.
    """
    if not patterns:
        return False

    excluded = False
    for pat in patterns:
        if pat == "":
            continue
        if pat.startswith("!"):
            if fnmatch(rel_path, pat[1:]):
                excluded = False
        elif fnmatch(rel_path, pat):
            excluded = True
    return excluded


def build_file_meta(path: Path) -> Tuple[Optional[dict], bool]:
    """
    Build file metadata (hash, size, mtime).

    Returns (meta, unreadable):
    - meta is None when file missing or unreadable
    - unreadable True means "exists but we couldn't read/hash it"
    """
    try:
        stat = path.stat()
    except FileNotFoundError:
        return None, False
    except OSError:
        return None, True

    file_hash = hash_file(path)
    if file_hash is None:
        return None, True

    return {
        "hash": file_hash,
        "size": stat.st_size,
        "mtime": int(stat.st_mtime),
    }, False


def scan_theme(theme_dir: Path, exclude: Optional[List[str]] = None, follow_symlinks: bool = False) -> Dict[str, dict]:
    """
    Walk <theme_dir>/source and return metadata keyed by raw path:
    {
        "source/css/style.css": {"hash": "...", "size": 1234, "mtime": 1700000000},
        ...
    }

    Every file is returned; deciding which ones are assets is the matcher's job.
    exclude: fnmatch patterns matched against the raw path. Use '!pattern' to negate.
    """
    exclude = exclude or []
    theme_dir = theme_dir.resolve()
    source_dir = theme_dir / SOURCE_PREFIX.rstrip("/")

    results: Dict[str, dict] = {}
    if not source_dir.is_dir():
        logger.warning("No source directory under %s", theme_dir)
        return results

    for root, _dirs, files in os.walk(source_dir, followlinks=follow_symlinks):
        for filename in files:
            file_path = Path(root) / filename
            raw_path = to_raw_path(file_path.relative_to(theme_dir))

            if _matches_exclude_patterns(raw_path, exclude):
                continue

            meta, unreadable = build_file_meta(file_path)
            if meta is None:
                # vanished mid-scan, or unreadable (hasher already logged)
                if unreadable:
                    logger.debug("Skipping unreadable %s", raw_path)
                continue
            results[raw_path] = meta

    return results

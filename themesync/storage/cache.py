from pathlib import Path
from typing import Dict

from ..schema import build_cache_structure
from .json_store import load_json, save_json


def load_cache(path: Path) -> Dict[str, dict]:
    """
    Load the hash cache: {raw_path: {"hash", "size", "mtime"}}.
    A missing cache file means nothing has been indexed yet.
    """
    data = load_json(path)
    if data is None:
        return {}
    return dict(data.get("files", {}))


def save_cache(path: Path, theme_dir: str, files: Dict[str, dict]) -> None:
    save_json(path, build_cache_structure(theme_dir, dict(sorted(files.items()))))

import hashlib
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

HASH_ALGO = "sha256"
_CHUNK_SIZE = 64 * 1024


def hash_file(path: Path, algo: str = HASH_ALGO) -> Optional[str]:
    """
    Hex digest of a theme file's content.

    Returns None when the file can't be read right now (locked by an editor,
    half-written, or gone); the scanner skips it and the watcher retries.
    """
    digest = hashlib.new(algo)
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(_CHUNK_SIZE)
                if not chunk:
                    break
                digest.update(chunk)
    except OSError as e:
        logger.warning("Cannot hash %s: %s", path, e)
        return None
    return digest.hexdigest()

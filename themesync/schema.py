from datetime import datetime, timezone

from .hasher import HASH_ALGO

INDEX_SCHEMA_VERSION = 1
CACHE_SCHEMA_VERSION = 1


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_index_structure(records: dict) -> dict:
    return {
        "schema_version": INDEX_SCHEMA_VERSION,
        "records": records,
    }


def build_cache_structure(theme_dir: str, files: dict) -> dict:
    return {
        "schema_version": CACHE_SCHEMA_VERSION,
        "updated_at": _now(),
        "theme_dir": theme_dir,
        "hash_algo": HASH_ALGO,
        "files": files,
    }

import yaml
from pathlib import Path

DEFAULT_CONFIG = {
    "theme_dir": ".",
    "theme": None,
    "index": "asset_index.json",
    "cache": "asset_cache.json",
    "log": "themesync.log",
    "exclude": [],
    "debounce_ms": 600,
}

DEFAULT_CONFIG_NAME = "themesync.yml"


def load_config(path: Path) -> dict:
    # If config file missing → return defaults
    if not path.exists():
        return DEFAULT_CONFIG.copy()

    with path.open("r", encoding="utf-8") as f:
        user_config = yaml.safe_load(f) or {}

    if not isinstance(user_config, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(user_config).__name__}")

    final_config = DEFAULT_CONFIG.copy()
    final_config.update(user_config)

    return final_config

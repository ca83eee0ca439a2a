from pathlib import Path
from typing import Any, Dict, List, Optional
from .config import DEFAULT_CONFIG, DEFAULT_CONFIG_NAME, load_config


def _to_list_arg(value: Optional[List[str]]) -> Optional[List[str]]:
    """
    Normalize CLI exclude arg handling.
    argparse may give None, a list of single string, or multiple entries.
    We want either None or a flat list.
    """
    if value is None:
        return None
    flat = []
    for v in value:
        if isinstance(v, list):
            flat.extend(v)
        else:
            flat.append(v)
    return flat


def build_settings(args: Any, config_path: Optional[str]) -> Dict[str, Any]:
    """
    Build final settings using priority:
      DEFAULTS <- config file <- CLI args (non-None)
    Args:
      args: argparse.Namespace (CLI arguments)
      config_path: explicit config file path (string) or None
    Returns:
      dict with keys: theme_dir, theme, index, cache, log, exclude, debounce_ms
    """
    cfg_path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_NAME)
    final = load_config(cfg_path)

    for key in ("theme_dir", "theme", "index", "cache", "log", "debounce_ms"):
        value = getattr(args, key, None)
        if value is not None:
            final[key] = value

    cli_excludes = _to_list_arg(getattr(args, "exclude", None))
    if cli_excludes is not None:
        final["exclude"] = cli_excludes

    final["exclude"] = final.get("exclude") or []

    # theme name defaults to the theme directory's own name
    if not final.get("theme"):
        final["theme"] = Path(final["theme_dir"]).resolve().name

    return final

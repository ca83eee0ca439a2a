#!/usr/bin/env python3
"""
CLI entrypoint for themesync.

Usage examples:
  python -m themesync scan themes/landscape
  python -m themesync watch themes/landscape --exclude "source/vendor/*"
  python -m themesync show --modified --index asset_index.json
"""

import argparse
import asyncio
from pathlib import Path
from typing import Any, List, Optional

from .events import ChangeType
from .logging_config import attach_console, attach_log_file
from .matcher import SOURCE_PREFIX
from .models import theme_namespace
from .dispatcher import Reconciler
from .settings import build_settings
from .storage.cache import load_cache
from .storage.json_store import JsonAssetStore
from .sync import sync_theme
from .watch import watch


def _prepare(args: Any) -> dict:
    settings = build_settings(args, args.config)
    attach_log_file(settings["log"], verbose=args.verbose)
    return settings


def _source_dir_missing(theme_dir: Path) -> bool:
    if (theme_dir / SOURCE_PREFIX).is_dir():
        return False
    print(f"ERROR: No {SOURCE_PREFIX} directory in theme: {theme_dir}")
    return True


def scan_command(args: Any) -> int:
    """
    Full rescan: reconcile the asset index with the theme's source/ tree.
    """
    settings = _prepare(args)
    theme_dir = Path(settings["theme_dir"]).resolve()
    if _source_dir_missing(theme_dir):
        return 1

    store = JsonAssetStore(Path(settings["index"]))
    namespace = theme_namespace(settings["theme"])

    print(f"Scanning theme: {theme_dir}")
    report = asyncio.run(
        sync_theme(
            theme_dir,
            store,
            Path(settings["cache"]),
            namespace,
            exclude=settings["exclude"],
        )
    )

    print(f"\n=== {namespace} ===")
    print(f"  created:   {report.counts[ChangeType.CREATE]}")
    print(f"  updated:   {report.counts[ChangeType.UPDATE]}")
    print(f"  deleted:   {report.counts[ChangeType.DELETE]}")
    print(f"  unchanged: {report.counts[ChangeType.SKIP]}")

    if not report.ok:
        print("\n[FAILED]")
        for raw_path, err in report.failures:
            print(f" ! {raw_path}: {err}")
        print(f"\nERROR: {len(report.failures)} asset(s) could not be reconciled")
        return 1

    print(f"\nIndex saved to {settings['index']}")
    return 0


def watch_command(args: Any) -> int:
    """
    Watch the theme and reconcile the index on every asset change.
    """
    settings = _prepare(args)
    theme_dir = Path(settings["theme_dir"]).resolve()
    if _source_dir_missing(theme_dir):
        return 1

    store = JsonAssetStore(Path(settings["index"]))
    reconciler = Reconciler(store, theme_namespace(settings["theme"]))
    cache_path = Path(settings["cache"])

    watch(
        theme_dir,
        reconciler,
        load_cache(cache_path),
        cache_path,
        exclude=settings["exclude"],
        debounce_ms=int(settings["debounce_ms"]),
        use_polling=args.polling,
    )
    return 0


def show_command(args: Any) -> int:
    """
    List index records, optionally only those still marked modified.
    """
    settings = _prepare(args)
    index_path = Path(settings["index"])
    if not index_path.exists():
        print(f"ERROR: Index not found at: {index_path}. Create one with `themesync scan` first.")
        return 1

    records = asyncio.run(JsonAssetStore(index_path).all())
    if args.modified:
        records = [r for r in records if r.modified]

    for record in records:
        flag = "*" if record.modified else " "
        print(f" {flag} {record.id}")
    print(f"\n{len(records)} record(s)")
    return 0


def _add_common_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("theme_dir", nargs="?", help="Theme directory (contains source/)", default=None)
    p.add_argument("--config", help="Path to YAML config file", default=None)
    p.add_argument("--theme", help="Theme name used in asset ids (default: directory name)", default=None)
    p.add_argument("--index", help="Path to asset index JSON file", default=None)
    p.add_argument("--cache", help="Path to hash cache JSON file", default=None)
    p.add_argument("--log", help="Path to rotating log file", default=None)
    p.add_argument("-v", "--verbose", action="store_true", help="Log every index mutation")
    p.add_argument(
        "--exclude",
        nargs="*",
        action="append",
        help="Exclude patterns on raw paths (can be passed multiple times)",
        default=None,
    )


def build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="themesync", description="Theme asset index synchronizer")
    sub = parser.add_subparsers(dest="command", required=True)

    p_scan = sub.add_parser("scan", help="Rescan source/ and reconcile the asset index")
    _add_common_options(p_scan)

    p_watch = sub.add_parser("watch", help="Reconcile the asset index on file changes")
    _add_common_options(p_watch)
    p_watch.add_argument("--debounce-ms", dest="debounce_ms", type=int, default=None)
    p_watch.add_argument("--polling", action="store_true", help="Use the polling observer")

    p_show = sub.add_parser("show", help="List asset index records")
    _add_common_options(p_show)
    p_show.add_argument("--modified", action="store_true", help="Only records marked modified")

    return parser


def main(argv: Optional[List[str]] = None, console: bool = False) -> int:
    parser = build_cli()
    args = parser.parse_args(argv)
    if console:
        attach_console(verbose=args.verbose)

    if args.command == "scan":
        return scan_command(args)
    if args.command == "watch":
        return watch_command(args)
    if args.command == "show":
        return show_command(args)
    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())

# tests/test_scanner.py
from pathlib import Path

from themesync.comparator import build_events, classify_changes
from themesync.events import ChangeType
from themesync.scanner import scan_theme


def _theme(tmp_path: Path) -> Path:
    theme = tmp_path / "landscape"
    (theme / "source" / "css").mkdir(parents=True)
    (theme / "layout").mkdir()
    (theme / "source" / "css" / "style.css").write_text("a")
    (theme / "source" / "_partial.css").write_text("b")
    (theme / "layout" / "index.njk").write_text("c")
    return theme


def test_scan_theme_keys_by_raw_path(tmp_path: Path):
    res = scan_theme(_theme(tmp_path))
    assert set(res) == {"source/css/style.css", "source/_partial.css"}
    assert "hash" in res["source/css/style.css"]


def test_scan_theme_exclude_glob(tmp_path: Path):
    res = scan_theme(_theme(tmp_path), exclude=["source/css/*"])
    assert set(res) == {"source/_partial.css"}


def test_scan_theme_without_source_dir(tmp_path: Path):
    assert scan_theme(tmp_path) == {}


def test_classify_changes_buckets():
    old = {
        "source/a.css": {"hash": "h1"},
        "source/b.css": {"hash": "h2"},
        "source/c.css": {"hash": "h3"},
    }
    new = {
        "source/a.css": {"hash": "h1"},
        "source/b.css": {"hash": "h2_mod"},
        "source/d.css": {"hash": "h4"},
    }
    changes = classify_changes(old, new)
    assert changes[ChangeType.CREATE] == ["source/d.css"]
    assert changes[ChangeType.UPDATE] == ["source/b.css"]
    assert changes[ChangeType.SKIP] == ["source/a.css"]
    assert changes[ChangeType.DELETE] == ["source/c.css"]


def test_build_events_drops_non_assets(tmp_path: Path):
    changes = {
        ChangeType.CREATE: ["source/a.css", "source/_b.css", "source/c.css~"],
        ChangeType.UPDATE: [],
        ChangeType.SKIP: [],
        ChangeType.DELETE: ["source/old.js"],
    }
    events = build_events(tmp_path, changes)
    assert [(e.type, e.asset_path) for e in events] == [
        (ChangeType.CREATE, "a.css"),
        (ChangeType.DELETE, "old.js"),
    ]
    assert events[0].source_file_path == str(tmp_path.resolve() / "source/a.css")

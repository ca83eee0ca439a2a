# tests/test_watch.py
import asyncio
from pathlib import Path

from watchdog.events import DirCreatedEvent, DirDeletedEvent, DirMovedEvent

from themesync.dispatcher import Reconciler
from themesync.events import ChangeType
from themesync.models import AssetRecord
from themesync.storage.memory import MemoryAssetStore
from themesync.watch import WatchHandler, compare_file, normalize_event

NS = "themes/t"


def _handler(tmp_path: Path, store, cache=None):
    theme = tmp_path / "t"
    (theme / "source").mkdir(parents=True, exist_ok=True)
    return theme, WatchHandler(theme, Reconciler(store, NS), cache if cache is not None else {}, debounce_ms=0)


def test_normalize_event_moved_becomes_delete_create():
    evs = normalize_event("moved", "/x/source/a.css", "/x/source/b.css")
    assert [e.kind for e in evs] == ["deleted", "created"]
    assert str(evs[1].abs_path).endswith("b.css")


def test_normalize_event_unknown_is_ignored():
    assert normalize_event("opened", "/x/a.css") == []


def test_compare_file_decisions(tmp_path: Path):
    p = tmp_path / "a.css"
    assert compare_file(p, None).change_type is ChangeType.DELETE

    p.write_text("one")
    created = compare_file(p, None)
    assert created.change_type is ChangeType.CREATE
    assert compare_file(p, created.meta).change_type is ChangeType.SKIP
    assert compare_file(p, {"hash": "other"}).change_type is ChangeType.UPDATE


def test_evaluate_create_update_delete(tmp_path: Path):
    store = MemoryAssetStore()
    theme, handler = _handler(tmp_path, store)
    f = theme / "source" / "style.css"

    f.write_text("v1")
    assert handler.evaluate("source/style.css", f).type is ChangeType.CREATE
    assert "source/style.css" in handler.cache
    asyncio.run(store.update(f"{NS}/style.css", modified=False))

    assert handler.evaluate("source/style.css", f).type is ChangeType.SKIP
    assert asyncio.run(store.find(f"{NS}/style.css")).modified is False

    f.write_text("v2")
    assert handler.evaluate("source/style.css", f).type is ChangeType.UPDATE
    assert asyncio.run(store.find(f"{NS}/style.css")).modified is True

    f.unlink()
    result = handler.evaluate("source/style.css", f)
    assert result.type is ChangeType.DELETE and result.mutated is True
    assert asyncio.run(store.find(f"{NS}/style.css")) is None
    assert "source/style.css" not in handler.cache

    # second delete for the same path is harmless
    assert handler.evaluate("source/style.css", f).mutated is False


def test_should_ignore_uses_matcher_and_excludes(tmp_path: Path):
    _theme, handler = _handler(tmp_path, MemoryAssetStore())
    handler.exclude = ["source/vendor/*"]
    assert handler._should_ignore("layout/index.njk")
    assert handler._should_ignore("source/_draft.css")
    assert handler._should_ignore("source/style.css~")
    assert handler._should_ignore("source/vendor/lib.js")
    assert not handler._should_ignore("source/style.css")


def test_raw_path_outside_theme_is_none(tmp_path: Path):
    theme, handler = _handler(tmp_path, MemoryAssetStore())
    assert handler._raw_path(str(theme / "source" / "a.css")) == "source/a.css"
    assert handler._raw_path(str(tmp_path / "elsewhere.css")) is None


def test_failed_dispatch_does_not_update_cache(tmp_path: Path):
    class BrokenStore(MemoryAssetStore):
        async def insert(self, record):
            raise OSError("disk unavailable")

    theme, handler = _handler(tmp_path, BrokenStore())
    f = theme / "source" / "a.css"
    f.write_text("x")
    handler._pending["source/a.css"] = f
    handler._flush_one("source/a.css")  # logs, does not raise
    assert handler.cache == {}


def test_skip_does_not_touch_existing_record(tmp_path: Path):
    record = AssetRecord(id=f"{NS}/a.css", path="a.css", modified=False)
    store = MemoryAssetStore([record])
    theme, handler = _handler(tmp_path, store)
    f = theme / "source" / "a.css"
    f.write_text("x")
    handler.cache["source/a.css"] = compare_file(f, None).meta

    handler.evaluate("source/a.css", f)
    assert asyncio.run(store.find(record.id)) == record


def _recording(handler):
    scheduled = []
    handler._schedule_evaluation = lambda raw_path, abs_path: scheduled.append(raw_path)
    return scheduled


def test_deleted_directory_expands_to_cached_assets(tmp_path: Path):
    cache = {
        "source/img/a.png": {"hash": "h1"},
        "source/img/sub/b.png": {"hash": "h2"},
        "source/img/_draft.png": {"hash": "h3"},
        "source/imgs/c.png": {"hash": "h4"},
        "source/style.css": {"hash": "h5"},
    }
    theme, handler = _handler(tmp_path, MemoryAssetStore(), cache)
    scheduled = _recording(handler)

    handler.on_deleted(DirDeletedEvent(str(theme / "source" / "img")))
    assert scheduled == ["source/img/a.png", "source/img/sub/b.png"]


def test_moved_directory_deletes_old_and_creates_new(tmp_path: Path):
    store = MemoryAssetStore([
        AssetRecord(id=f"{NS}/img/a.png", path="img/a.png", modified=False),
    ])
    theme, handler = _handler(tmp_path, store, {"source/img/a.png": {"hash": "h1"}})
    new_dir = theme / "source" / "images"
    new_dir.mkdir()
    (new_dir / "a.png").write_text("png")
    scheduled = _recording(handler)

    handler.on_moved(DirMovedEvent(str(theme / "source" / "img"), str(new_dir)))
    assert scheduled == ["source/img/a.png", "source/images/a.png"]

    for raw_path in scheduled:
        handler.evaluate(raw_path, theme / raw_path)
    assert [r.id for r in asyncio.run(store.all())] == [f"{NS}/images/a.png"]


def test_created_directory_expands_to_its_files(tmp_path: Path):
    theme, handler = _handler(tmp_path, MemoryAssetStore())
    new_dir = theme / "source" / "fonts"
    (new_dir / "woff").mkdir(parents=True)
    (new_dir / "woff" / "x.woff").write_text("f")
    (new_dir / "x.ttf~").write_text("backup")
    scheduled = _recording(handler)

    handler.on_created(DirCreatedEvent(str(new_dir)))
    assert scheduled == ["source/fonts/woff/x.woff"]

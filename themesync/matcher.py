"""
Path classification for theme assets.

A raw path is relative to the theme root, e.g. ``source/css/style.css``.
Only files under ``source/`` are assets, and the asset path is the raw path
with that prefix stripped:

    source/foo.jpg        -> Accepted("foo.jpg")
    source/_foo.jpg       -> Rejected  (partial / hidden)
    source/foo/_bar.jpg   -> Rejected  (any segment starting with "_")
    source/foo.jpg~       -> Rejected  (editor backup)
    source/foo.jpg%       -> Rejected  (lock / temp marker)
    layout/foo.njk        -> Rejected  (outside source/)
    source/node_modules/x -> Rejected  (vendored packages)
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Union

from .utils import normalize_rel_path

SOURCE_PREFIX = "source/"

_HIDDEN_PREFIX = "_"
_IGNORED_SUFFIXES = ("~", "%")
_VENDOR_DIR = "node_modules"


@dataclass(frozen=True, slots=True)
class Accepted:
    path: str

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Rejected:
    @property
    def accepted(self) -> bool:
        return False


MatchResult = Union[Accepted, Rejected]

REJECTED = Rejected()


def match(raw_path: str) -> MatchResult:
    if not raw_path.startswith(SOURCE_PREFIX):
        return REJECTED

    rel = raw_path[len(SOURCE_PREFIX):]
    if not rel:
        return REJECTED

    # vendored packages shipped inside a theme are never assets
    if _VENDOR_DIR in rel:
        return REJECTED

    segments = rel.split("/")
    if any(seg.startswith(_HIDDEN_PREFIX) for seg in segments):
        return REJECTED

    if segments[-1].endswith(_IGNORED_SUFFIXES):
        return REJECTED

    return Accepted(path=rel)


def to_raw_path(rel: Union[str, PurePath]) -> str:
    """Normalize a theme-relative OS path into the raw form ``match`` expects."""
    return normalize_rel_path(rel)

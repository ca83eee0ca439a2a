from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .matcher import match


class InvalidEventType(ValueError):
    """Raised when an event type is not one of create/update/skip/delete."""


class ChangeType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: Union["ChangeType", str]) -> "ChangeType":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidEventType(f"unknown event type: {value!r}") from None


@dataclass(frozen=True, slots=True)
class FileChangeEvent:
    type: ChangeType
    raw_path: str  # theme-relative, e.g. "source/style.css"
    source_file_path: str  # absolute location on disk
    asset_path: str  # matcher output for raw_path

    @classmethod
    def from_raw(
        cls,
        type: Union[ChangeType, str],
        raw_path: str,
        source_file_path: str,
    ) -> Optional["FileChangeEvent"]:
        """
        Build an event for raw_path, or return None if raw_path is not an asset.
        """
        result = match(raw_path)
        if not result.accepted:
            return None
        return cls(
            type=ChangeType.parse(type),
            raw_path=raw_path,
            source_file_path=source_file_path,
            asset_path=result.path,
        )

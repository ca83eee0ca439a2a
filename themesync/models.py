from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


def theme_namespace(theme_name: str) -> str:
    return f"themes/{theme_name}"


def asset_id(namespace: str, asset_path: str) -> str:
    return f"{namespace}/{asset_path}"


@dataclass(frozen=True, slots=True)
class AssetRecord:
    """
    One entry of the asset index.

    - id: "<namespace>/<asset path>", unique across the index
    - path: the asset path (id suffix), kept for querying
    - modified: True when downstream consumers must re-derive this asset
    """

    id: str
    path: str
    modified: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "path": self.path, "modified": self.modified}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssetRecord":
        return cls(
            id=data["id"],
            path=data["path"],
            modified=bool(data.get("modified", False)),
        )

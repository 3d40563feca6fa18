"""
MergeRecord — persisted completion marker of a merge.

Owned by the caller (component, editor tool) and passed into the
orchestrator. While `completed` is set, further merges are refused
until reset().
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Union

from meshmerge import log


@dataclass
class MergeRecord:
    completed: bool = False
    proxy_count: int = 0
    instance_count: int = 0
    shape_count: int = 0

    def mark(self, proxy_count: int, instance_count: int, shape_count: int) -> None:
        self.completed = True
        self.proxy_count = proxy_count
        self.instance_count = instance_count
        self.shape_count = shape_count

    def reset(self) -> None:
        self.completed = False
        self.proxy_count = 0
        self.instance_count = 0
        self.shape_count = 0

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "MergeRecord":
        return MergeRecord(
            completed=bool(data.get("completed", False)),
            proxy_count=int(data.get("proxy_count", 0)),
            instance_count=int(data.get("instance_count", 0)),
            shape_count=int(data.get("shape_count", 0)),
        )

    def save(self, path: Union[str, Path]) -> bool:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            log.error(f"[MergeRecord] Failed to save {path}: {e}")
            return False

    @staticmethod
    def load(path: Union[str, Path]) -> "MergeRecord":
        """Load record; a missing or broken file gives a fresh record."""
        path = Path(path)
        if not path.exists():
            return MergeRecord()
        try:
            with open(path, "r", encoding="utf-8") as f:
                return MergeRecord.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            log.error(f"[MergeRecord] Failed to load {path}: {e}")
            return MergeRecord()

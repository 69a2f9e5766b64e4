"""Persistence adapters for the draft store.

An adapter persists one JSON blob under a fixed namespace. ``load`` returns the
blob (or ``None`` when nothing was stored yet) and ``save`` returns whether the
write reached storage. Neither raises for I/O problems.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional, Protocol

from ..config import get_config
from ..logging import get_logger


class DraftStorage(Protocol):
    """Load/save contract used by the draft store."""

    def load(self) -> Optional[dict]:
        ...

    def save(self, blob: dict) -> bool:
        ...


class MemoryStorage:
    """Keeps the blob as serialized JSON in memory, mirroring a disk round-trip."""

    def __init__(self, blob: Optional[dict] = None, fail_writes: bool = False) -> None:
        self._raw: Optional[str] = json.dumps(blob) if blob is not None else None
        self.fail_writes = fail_writes
        self.saves = 0

    def load(self) -> Optional[dict]:
        if self._raw is None:
            return None
        return json.loads(self._raw)

    def save(self, blob: dict) -> bool:
        if self.fail_writes:
            return False
        self._raw = json.dumps(blob)
        self.saves += 1
        return True


class JsonFileStorage:
    """Stores the blob as ``<directory>/<namespace>.json``; writes replace the file atomically."""

    def __init__(self, directory: str | Path, namespace: str) -> None:
        self.path = Path(directory) / f"{namespace}.json"
        self.logger = get_logger(__name__)

    @classmethod
    def from_config(cls, suffix: str = "") -> "JsonFileStorage":
        config = get_config()
        return cls(config.drafts_dir, config.draft_namespace + suffix)

    def load(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not read drafts from {self.path}: {e}")
            return None

    def save(self, blob: dict) -> bool:
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(blob, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            self.logger.error(f"Could not write drafts to {self.path}: {e}")
            tmp_path.unlink(missing_ok=True)
            return False
        return True

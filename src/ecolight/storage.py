"""Record persistence: a JSON-file append/read log of analysis results."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Protocol

from .records import PersistedRequestRecord


class StorageError(Exception):
    """Raised when records cannot be written or read back."""


class PersistenceGateway(Protocol):
    """Where finished analysis records go."""

    def append(self, record: PersistedRequestRecord) -> PersistedRequestRecord:
        """Store a record, returning it with its assigned id. Raises StorageError."""
        ...

    def list_all(self) -> list[PersistedRequestRecord]:
        """All stored records, most recent first. Raises StorageError."""
        ...


class JsonRecordStore:
    """
    Records kept in a single JSON file.

    File layout:
        {"next_id": 3, "records": [{...}, {...}]}

    Ids auto-increment from 1. Writes go to a sibling temp file that then
    replaces the original, so a failed write never truncates the log.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict:
        if not self.path.exists():
            return {"next_id": 1, "records": []}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("records"), list):
            raise StorageError(f"unexpected layout in {self.path}")
        return data

    def _save(self, data: dict) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"cannot write {self.path}: {e}") from e

    def append(self, record: PersistedRequestRecord) -> PersistedRequestRecord:
        with self._lock:
            data = self._load()
            next_id = int(data.get("next_id", len(data["records"]) + 1))
            stored = record.with_id(next_id)
            data["records"].append(stored.to_dict())
            data["next_id"] = next_id + 1
            self._save(data)
        return stored

    def list_all(self) -> list[PersistedRequestRecord]:
        with self._lock:
            data = self._load()
        try:
            records = [PersistedRequestRecord.from_dict(r) for r in data["records"]]
            return sorted(records, key=lambda r: (r.timestamp, r.id or 0), reverse=True)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"corrupt record in {self.path}: {e}") from e

    def __len__(self) -> int:
        with self._lock:
            return len(self._load()["records"])

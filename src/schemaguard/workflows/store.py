"""In-memory record store used by the reference workflow executors."""

import copy
import threading
from typing import Any


class RecordStore:
    """Append-only store of records grouped by collection"""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: dict[str, list[dict[str, Any]]] = {}

    def write(self, collection: str, record: dict[str, Any]) -> None:
        with self._lock:
            self._records.setdefault(collection, []).append(copy.deepcopy(record))

    def records(self, collection: str) -> list[dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._records.get(collection, []))

    def count(self, collection: str | None = None) -> int:
        with self._lock:
            if collection is not None:
                return len(self._records.get(collection, []))
            return sum(len(r) for r in self._records.values())

"""In-process record store, used by tests and embedding hosts."""

import copy
import threading
from typing import Any, Iterable, Optional

from dealboard.store.base import RecordStore


class MemoryRecordStore(RecordStore):
    """Dict of partition -> list of raw records. Reads return copies."""

    def __init__(self, partitions: Optional[dict[str, list[Any]]] = None):
        super().__init__()
        self._partitions: dict[str, list[Any]] = {
            key: list(records) for key, records in (partitions or {}).items()
        }
        self._lock = threading.Lock()

    def read(self, partition: str) -> list[Any]:
        with self._lock:
            return copy.deepcopy(self._partitions.get(partition, []))

    def write(self, partition: str, records: Iterable[Any]) -> None:
        """Replace the partition contents."""
        with self._lock:
            self._partitions[partition] = list(records)
        self._notify(partition)

    def append(self, partition: str, record: Any) -> None:
        with self._lock:
            self._partitions.setdefault(partition, []).append(record)
        self._notify(partition)

    def clear(self, partition: str) -> None:
        with self._lock:
            self._partitions.pop(partition, None)
        self._notify(partition)

    def partitions(self) -> list[str]:
        with self._lock:
            return sorted(self._partitions)

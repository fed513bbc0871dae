"""
Explicit caches owned by the dashboard provider.

Nothing here is module-level state: each cache is an object with a defined
lifetime, and ``clear()`` is the sign-out eviction hook.
"""

import hashlib
import json
import threading
from collections import OrderedDict
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

from dealboard.filtering.windows import describe_window
from dealboard.models.dashboard import DashboardOptions

V = TypeVar("V")


def snapshot_hash(records: list[Any]) -> Optional[str]:
    """Content hash of a raw-record snapshot; None when it can't be encoded."""
    try:
        payload = json.dumps(records, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return None
    return hashlib.sha256(payload.encode()).hexdigest()


def aggregation_key(
    records: list[Any],
    dashboard_type: Optional[str],
    options: DashboardOptions,
    day: str,
) -> Optional[tuple]:
    """
    Cache key covering the record snapshot and every option that changes the
    result, so no entry is reused across windows, participants or days.
    """
    digest = snapshot_hash(records)
    if digest is None:
        return None
    return (
        digest,
        dashboard_type,
        options.user_role,
        options.participant_id,
        describe_window(options.time_period),
        options.include_inactive,
        options.include_salespeople,
        day,
    )


class AggregationCache(Generic[V]):
    """LRU memo of dashboard results keyed by ``aggregation_key``."""

    def __init__(self, max_entries: int = 64):
        self.max_entries = max_entries
        self._entries: OrderedDict[Hashable, V] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Optional[Hashable]) -> Optional[V]:
        if key is None:
            return None
        with self._lock:
            value = self._entries.get(key)
            if value is not None:
                self._entries.move_to_end(key)
            return value

    def put(self, key: Optional[Hashable], value: V) -> None:
        if key is None or self.max_entries <= 0:
            return
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class LookupCache(Generic[V]):
    """Id -> value cache (e.g. participant roles) filled on demand by a loader."""

    def __init__(self) -> None:
        self._values: dict[str, Optional[V]] = {}
        self._lock = threading.Lock()

    def get_or_load(self, key: str, loader: Callable[[str], Optional[V]]) -> Optional[V]:
        with self._lock:
            if key in self._values:
                return self._values[key]
        value = loader(key)
        with self._lock:
            self._values[key] = value
        return value

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

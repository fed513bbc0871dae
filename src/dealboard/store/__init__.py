"""Raw deal record stores."""

from dealboard.store.base import RecordStore
from dealboard.store.http_store import HttpRecordStore
from dealboard.store.memory_store import MemoryRecordStore
from dealboard.store.sqlite_store import SQLiteRecordStore

__all__ = [
    "HttpRecordStore",
    "MemoryRecordStore",
    "RecordStore",
    "SQLiteRecordStore",
]

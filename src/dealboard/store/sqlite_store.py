"""SQLite-backed raw record store."""

import json
import logging
import sqlite3
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from dealboard.errors import StoreError
from dealboard.normalizing.aliases import resolve
from dealboard.normalizing.parsers import parse_text
from dealboard.store.base import RecordStore

logger = logging.getLogger(__name__)


def _record_id(record: Any) -> Optional[str]:
    if not isinstance(record, Mapping):
        return None
    return parse_text(resolve(record, "id")) or None


class SQLiteRecordStore(RecordStore):
    """
    SQLite store of raw deal records as JSON documents, one table row per record.
    Records are returned in insertion order.
    """

    def __init__(self, db_path: str | Path = "dealboard.db"):
        super().__init__()
        self._db_path = Path(db_path)
        self._ensure_schema()

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        try:
            with self._connection() as conn:
                conn.executescript(schema_path.read_text())
        except sqlite3.Error as e:
            raise StoreError("*", f"cannot initialise {self._db_path}: {e}") from e

    def _insert(self, conn: sqlite3.Connection, partition: str, records: Iterable[Any]) -> int:
        now = datetime.now(timezone.utc).isoformat()
        rows = [
            (partition, _record_id(r), json.dumps(r, default=str), now)
            for r in records
        ]
        conn.executemany(
            "INSERT INTO deal_records (partition, record_id, data, created_at) VALUES (?, ?, ?, ?)",
            rows,
        )
        return len(rows)

    def read(self, partition: str) -> list[Any]:
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    "SELECT id, data FROM deal_records WHERE partition = ? ORDER BY id",
                    (partition,),
                ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(partition, str(e)) from e

        records = []
        for row in rows:
            try:
                records.append(json.loads(row["data"]))
            except json.JSONDecodeError as e:
                logger.warning("Skipping undecodable record %s in %s: %s", row["id"], partition, e)
        return records

    def append(self, partition: str, records: Iterable[Any]) -> int:
        """Add records to a partition. Returns the number written."""
        try:
            with self._connection() as conn:
                written = self._insert(conn, partition, records)
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(partition, str(e)) from e
        self._notify(partition)
        return written

    def replace(self, partition: str, records: Iterable[Any]) -> int:
        """Replace the partition contents in one transaction."""
        try:
            with self._connection() as conn:
                conn.execute("DELETE FROM deal_records WHERE partition = ?", (partition,))
                written = self._insert(conn, partition, records)
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(partition, str(e)) from e
        self._notify(partition)
        return written

    def delete(self, partition: str, record_id: str) -> int:
        """Delete records with the given deal id. Returns rows removed."""
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM deal_records WHERE partition = ? AND record_id = ?",
                    (partition, record_id),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(partition, str(e)) from e
        if cursor.rowcount:
            self._notify(partition)
        return cursor.rowcount

    def count(self, partition: str) -> int:
        try:
            with self._connection() as conn:
                row = conn.execute(
                    "SELECT COUNT(*) AS n FROM deal_records WHERE partition = ?",
                    (partition,),
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(partition, str(e)) from e
        return row["n"]

    def partitions(self) -> list[str]:
        with self._connection() as conn:
            rows = conn.execute("SELECT DISTINCT partition FROM deal_records ORDER BY partition").fetchall()
        return [r["partition"] for r in rows]

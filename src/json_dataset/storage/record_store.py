"""Record store interfaces and concrete backends."""

from __future__ import annotations

import copy
import json
import sqlite3
import threading
import uuid
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from json_dataset.config import StoreConfig
from json_dataset.types import DatasetRecord


class RecordStore(Protocol):
    """Minimal persistence contract the query service depends on."""

    def insert(self, dataset_name: str, data: dict[str, Any]) -> DatasetRecord:
        """Store one JSON object under `dataset_name`."""

    def find_active(self, dataset_name: str) -> list[DatasetRecord]:
        """Return non-deleted records in insertion order."""

    def count_active(self, dataset_name: str) -> int:
        """Count non-deleted records."""

    def soft_delete(self, dataset_name: str) -> int:
        """Mark every record of a dataset deleted; return how many changed."""


class InMemoryRecordStore:
    """Process-local store used for tests and local prototyping."""

    def __init__(self) -> None:
        self._records: dict[str, DatasetRecord] = {}
        self._lock = threading.Lock()

    def insert(self, dataset_name: str, data: dict[str, Any]) -> DatasetRecord:
        now = datetime.now(timezone.utc)
        record = DatasetRecord(
            record_id=str(uuid.uuid4()),
            dataset_name=dataset_name,
            data=copy.deepcopy(data),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._records[record.record_id] = record
        return _detached(record)

    def find_active(self, dataset_name: str) -> list[DatasetRecord]:
        with self._lock:
            matches = [
                record
                for record in self._records.values()
                if record.dataset_name == dataset_name and not record.is_deleted
            ]
        return [_detached(record) for record in matches]

    def count_active(self, dataset_name: str) -> int:
        with self._lock:
            return sum(
                1
                for record in self._records.values()
                if record.dataset_name == dataset_name and not record.is_deleted
            )

    def soft_delete(self, dataset_name: str) -> int:
        changed = 0
        now = datetime.now(timezone.utc)
        with self._lock:
            for record in self._records.values():
                if record.dataset_name == dataset_name and not record.is_deleted:
                    record.is_deleted = True
                    record.updated_at = now
                    record.version += 1
                    changed += 1
        return changed


class SqliteRecordStore:
    """SQLite-backed store; one connection per call, JSON stored as text."""

    def __init__(self, path: str | Path) -> None:
        self._db_file = Path(path)
        _ensure_datasets_table(self._db_file)

    def insert(self, dataset_name: str, data: dict[str, Any]) -> DatasetRecord:
        now = datetime.now(timezone.utc)
        record = DatasetRecord(
            record_id=str(uuid.uuid4()),
            dataset_name=dataset_name,
            data=copy.deepcopy(data),
            created_at=now,
            updated_at=now,
        )
        with closing(sqlite3.connect(self._db_file)) as conn, conn:
            conn.execute(
                "INSERT INTO datasets(id, dataset_name, data, created_at, updated_at, is_deleted, version) "
                "VALUES(?, ?, ?, ?, ?, 0, 1)",
                (
                    record.record_id,
                    dataset_name,
                    json.dumps(data, ensure_ascii=False),
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
            conn.commit()
        return record

    def find_active(self, dataset_name: str) -> list[DatasetRecord]:
        with closing(sqlite3.connect(self._db_file)) as conn, conn:
            rows = conn.execute(
                "SELECT id, dataset_name, data, created_at, updated_at, is_deleted, version "
                "FROM datasets WHERE dataset_name = ? AND is_deleted = 0 ORDER BY seq",
                (dataset_name,),
            ).fetchall()
        return [_row_to_record(row) for row in rows]

    def count_active(self, dataset_name: str) -> int:
        with closing(sqlite3.connect(self._db_file)) as conn, conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM datasets WHERE dataset_name = ? AND is_deleted = 0",
                (dataset_name,),
            ).fetchone()
        return int(row[0])

    def soft_delete(self, dataset_name: str) -> int:
        with closing(sqlite3.connect(self._db_file)) as conn, conn:
            cur = conn.execute(
                "UPDATE datasets SET is_deleted = 1, updated_at = ?, version = version + 1 "
                "WHERE dataset_name = ? AND is_deleted = 0",
                (datetime.now(timezone.utc).isoformat(), dataset_name),
            )
            conn.commit()
            deleted = cur.rowcount
        return deleted


def create_record_store(config: StoreConfig | None = None) -> RecordStore:
    config = config or StoreConfig()
    if config.backend == "sqlite":
        return SqliteRecordStore(config.sqlite_path)
    return InMemoryRecordStore()


def _detached(record: DatasetRecord) -> DatasetRecord:
    return DatasetRecord(
        record_id=record.record_id,
        dataset_name=record.dataset_name,
        data=copy.deepcopy(record.data),
        created_at=record.created_at,
        updated_at=record.updated_at,
        is_deleted=record.is_deleted,
        version=record.version,
    )


def _row_to_record(row: tuple[Any, ...]) -> DatasetRecord:
    record_id, dataset_name, data, created_at, updated_at, is_deleted, version = row
    return DatasetRecord(
        record_id=record_id,
        dataset_name=dataset_name,
        data=json.loads(data),
        created_at=datetime.fromisoformat(created_at),
        updated_at=datetime.fromisoformat(updated_at),
        is_deleted=bool(is_deleted),
        version=int(version),
    )


def _ensure_datasets_table(db_path: Path) -> None:
    with closing(sqlite3.connect(db_path)) as conn, conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS datasets ("
            "seq INTEGER PRIMARY KEY AUTOINCREMENT, "
            "id TEXT NOT NULL UNIQUE, "
            "dataset_name TEXT NOT NULL, "
            "data TEXT NOT NULL, "
            "created_at TEXT NOT NULL, "
            "updated_at TEXT NOT NULL, "
            "is_deleted INTEGER NOT NULL DEFAULT 0, "
            "version INTEGER NOT NULL DEFAULT 1)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_datasets_name_active "
            "ON datasets(dataset_name, is_deleted)"
        )
        conn.commit()

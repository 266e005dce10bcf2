"""Query tracing and latency accounting."""

from __future__ import annotations

import threading
import time
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(slots=True)
class QueryTrace:
    trace_id: str
    timestamp_utc: str
    dataset_name: str
    operation: str
    field: str | None
    sort_field: str | None
    total_records: int
    field_type: str | None
    latency_ms: float
    success: bool
    error_code: str | None = None


class TraceStore:
    """In-memory trace storage for API-level observability."""

    def __init__(self, max_records: int = 1000) -> None:
        self._records: dict[str, QueryTrace] = {}
        self._max_records = max_records
        self._lock = threading.Lock()

    def create_record(
        self,
        *,
        dataset_name: str,
        operation: str,
        field: str | None,
        sort_field: str | None = None,
        total_records: int = 0,
        field_type: str | None = None,
        latency_ms: float,
        success: bool = True,
        error_code: str | None = None,
    ) -> QueryTrace:
        record = QueryTrace(
            trace_id=str(uuid.uuid4()),
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            dataset_name=dataset_name,
            operation=operation,
            field=field,
            sort_field=sort_field,
            total_records=total_records,
            field_type=field_type,
            latency_ms=latency_ms,
            success=success,
            error_code=error_code,
        )
        with self._lock:
            self._records[record.trace_id] = record
            while len(self._records) > self._max_records:
                self._records.pop(next(iter(self._records)))
        return record

    def get(self, trace_id: str) -> QueryTrace:
        record = self._records.get(trace_id)
        if record is None:
            raise KeyError(f"Trace not found: {trace_id}")
        return record

    def list_recent(self, limit: int = 20) -> list[QueryTrace]:
        with self._lock:
            records = list(self._records.values())
        return records[-limit:] if limit > 0 else []

    def summary(self) -> dict[str, object]:
        """Aggregate query counts and latency for dashboard display."""
        with self._lock:
            records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_queries": 0,
                "failed_queries": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "total_records_scanned": 0,
                "operations": {},
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_queries": total,
            "failed_queries": sum(1 for record in records if not record.success),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "total_records_scanned": sum(record.total_records for record in records),
            "operations": dict(Counter(record.operation for record in records)),
        }


class Timer:
    """Simple context timer used by the dataset service."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0

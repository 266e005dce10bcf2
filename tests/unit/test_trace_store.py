import pytest

from json_dataset.obs.tracing import Timer, TraceStore


def test_trace_store_summary_counts_operations_and_failures() -> None:
    store = TraceStore()
    store.create_record(dataset_name="p", operation="sort_by", field="age", latency_ms=4.0)
    store.create_record(dataset_name="p", operation="group_by", field="team", latency_ms=2.0)
    store.create_record(
        dataset_name="p",
        operation="sort_by",
        field="age",
        latency_ms=6.0,
        success=False,
        error_code="INVALID_FIELD",
    )

    summary = store.summary()

    assert summary["total_queries"] == 3
    assert summary["failed_queries"] == 1
    assert summary["avg_latency_ms"] == pytest.approx(4.0)
    assert summary["operations"] == {"sort_by": 2, "group_by": 1}


def test_trace_store_is_bounded_and_lookup_fails_cleanly() -> None:
    store = TraceStore(max_records=2)
    first = store.create_record(dataset_name="p", operation="sort_by", field="a", latency_ms=1.0)
    store.create_record(dataset_name="p", operation="sort_by", field="b", latency_ms=1.0)
    last = store.create_record(dataset_name="p", operation="sort_by", field="c", latency_ms=1.0)

    assert len(store.list_recent(limit=10)) == 2
    assert store.get(last.trace_id).field == "c"
    with pytest.raises(KeyError):
        store.get(first.trace_id)


def test_empty_summary_and_timer() -> None:
    assert TraceStore().summary()["total_queries"] == 0

    with Timer() as timer:
        sum(range(1000))
    assert timer.elapsed_ms >= 0.0

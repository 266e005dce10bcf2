import pytest
from fastapi.testclient import TestClient

from json_dataset.api.main import create_app
from json_dataset.config import AppSettings, StoreConfig


@pytest.fixture()
def client(tmp_path) -> TestClient:
    settings = AppSettings(
        store=StoreConfig(backend="sqlite", sqlite_path=str(tmp_path / "api.db"))
    )
    return TestClient(create_app(settings))


def _seed(client: TestClient) -> None:
    rows = [
        {"id": 1, "name": "Ann", "status": "active", "age": 10},
        {"id": 2, "name": "bob", "status": "active", "age": None},
        {"id": 3, "name": "Cy", "status": "inactive", "age": 5},
        {"id": 4, "name": "Dee", "status": "pending"},
    ]
    for row in rows:
        resp = client.post(
            "/api/datasets/people/record", json={"dataset_name": "people", "data": row}
        )
        assert resp.status_code == 201


def test_insert_query_trace_metrics(client: TestClient) -> None:
    insert_resp = client.post(
        "/api/datasets/people/record",
        json={"dataset_name": "someone_else", "data": {"id": 0, "status": "active"}},
    )
    assert insert_resp.status_code == 201
    body = insert_resp.json()
    assert body["success"] is True
    assert body["dataset_name"] == "people"
    assert body["record_id"]
    assert body["created_at"]

    _seed(client)

    group_resp = client.get("/api/datasets/people/query", params={"groupBy": "status"})
    assert group_resp.status_code == 200
    grouped = group_resp.json()
    assert grouped["metadata"]["total_groups"] == 3
    assert grouped["metadata"]["group_sizes"] == {"active": 3, "inactive": 1, "pending": 1}

    sort_resp = client.get(
        "/api/datasets/people/query", params={"sortBy": "age", "order": "desc"}
    )
    assert sort_resp.status_code == 200
    ages = [row.get("age") for row in sort_resp.json()["results"]]
    assert ages[:2] == [10, 5]
    assert ages[2:] == [None, None, None]

    both_resp = client.get(
        "/api/datasets/people/query", params={"groupBy": "status", "sortBy": "name"}
    )
    assert both_resp.status_code == 200
    assert both_resp.json()["operation"] == "group_by_then_sort"
    assert both_resp.json()["sort_field"] == "name"

    traces_resp = client.get("/traces", params={"limit": 10})
    assert traces_resp.status_code == 200
    trace_id = traces_resp.json()["items"][0]["trace_id"]
    assert client.get(f"/traces/{trace_id}").status_code == 200

    metrics_resp = client.get("/metrics")
    assert metrics_resp.status_code == 200
    assert metrics_resp.json()["total_queries"] == 3


def test_error_responses(client: TestClient) -> None:
    no_operation = client.get("/api/datasets/people/query")
    assert no_operation.status_code == 400
    assert no_operation.json()["code"] == "INVALID_JSON"

    bad_order = client.get(
        "/api/datasets/people/query", params={"sortBy": "age", "order": "sideways"}
    )
    assert bad_order.status_code == 400
    assert bad_order.json()["code"] == "INVALID_SORT_ORDER"
    assert bad_order.json()["path"] == "/api/datasets/people/query"

    blank_field = client.get("/api/datasets/people/query", params={"groupBy": " "})
    assert blank_field.status_code == 400
    assert blank_field.json()["code"] == "INVALID_FIELD"

    bad_name = client.post("/api/datasets/1bad/record", json={"data": {"a": 1}})
    assert bad_name.status_code == 400
    assert bad_name.json()["code"] == "DATASET_VALIDATION_ERROR"

    missing_data = client.post("/api/datasets/people/record", json={"dataset_name": "people"})
    assert missing_data.status_code == 400
    assert missing_data.json()["code"] == "VALIDATION_ERROR"

    unknown = client.get("/api/nowhere")
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "ENDPOINT_NOT_FOUND"

    missing_trace = client.get("/traces/does-not-exist")
    assert missing_trace.status_code == 404

    metrics = client.get("/metrics").json()
    assert metrics["total_queries"] == 3
    assert metrics["failed_queries"] == 3


def test_empty_dataset_query(client: TestClient) -> None:
    resp = client.get("/api/datasets/ghost/query", params={"sortBy": "age"})

    assert resp.status_code == 200
    assert resp.json()["results"] == []
    assert resp.json()["sort_metadata"]["warnings"] == ["Dataset is empty"]


def test_health_endpoints(client: TestClient) -> None:
    assert client.get("/api/datasets/health").json() == {
        "status": "UP",
        "message": "Dataset API is running",
    }
    assert client.get("/health").json()["store_backend"] == "sqlite"

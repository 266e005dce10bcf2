"""FastAPI entrypoint for dataset insert/query/trace endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from json_dataset.config import AppSettings
from json_dataset.errors import DatasetServiceError
from json_dataset.obs.logger import configure_logging, get_logger
from json_dataset.obs.tracing import TraceStore
from json_dataset.query.engine import QueryEngine
from json_dataset.service import DatasetService
from json_dataset.storage.record_store import RecordStore, create_record_store
from json_dataset.storage.validation import DatasetValidator

logger = get_logger(__name__)

_REASON_PHRASES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


class InsertRecordRequest(BaseModel):
    dataset_name: str | None = None
    data: dict[str, Any]


class InsertRecordResponse(BaseModel):
    success: bool = True
    message: str = "Record inserted successfully"
    record_id: str
    dataset_name: str
    created_at: datetime


def error_payload(
    status: int,
    message: str,
    code: str,
    path: str,
    details: list[str] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "timestamp": datetime.now().replace(microsecond=0).isoformat(),
        "status": status,
        "error": _REASON_PHRASES.get(status, "Error"),
        "message": message,
        "code": code,
        "path": path,
    }
    if details is not None:
        payload["details"] = details
    return payload


def create_app(
    settings: AppSettings | None = None,
    *,
    store: RecordStore | None = None,
) -> FastAPI:
    """Assemble the service graph and its HTTP routes."""
    settings = settings or AppSettings()
    trace_store = TraceStore()
    service = DatasetService(
        store or create_record_store(settings.store),
        validator=DatasetValidator(settings.store),
        engine=QueryEngine(settings.query),
        trace_store=trace_store,
    )

    app = FastAPI(title="JSON Dataset API", version="0.1.0")
    app.state.service = service

    @app.exception_handler(DatasetServiceError)
    async def _dataset_error(request: Request, exc: DatasetServiceError) -> JSONResponse:
        logger.warning("%s at %s: %s", type(exc).__name__, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.http_status,
            content=error_payload(
                exc.http_status, exc.message, exc.error_code, request.url.path, exc.details
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("Validation error at %s: %s", request.url.path, exc.errors())
        details = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=error_payload(
                400, "Request validation failed", "VALIDATION_ERROR", request.url.path, details
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404 and exc.detail == "Not Found":
            logger.warning("Endpoint not found: %s", request.url.path)
            content = error_payload(
                404,
                "The requested endpoint does not exist",
                "ENDPOINT_NOT_FOUND",
                request.url.path,
                [f"No handler found for {request.method} {request.url.path}"],
            )
        elif exc.status_code == 405:
            logger.warning("Method not supported at %s: %s", request.url.path, request.method)
            content = error_payload(
                405,
                f"Method '{request.method}' not allowed for this endpoint",
                "METHOD_NOT_ALLOWED",
                request.url.path,
            )
        else:
            content = error_payload(
                exc.status_code, str(exc.detail), "HTTP_ERROR", request.url.path
            )
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unexpected error at %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_payload(
                500,
                "An unexpected error occurred. Please try again later or contact support.",
                "INTERNAL_ERROR",
                request.url.path,
            ),
        )

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "store_backend": settings.store.backend,
            "trace_count": len(trace_store.list_recent(limit=1000)),
        }

    @app.get("/api/datasets/health")
    def dataset_health() -> dict[str, Any]:
        return {"status": "UP", "message": "Dataset API is running"}

    @app.post("/api/datasets/{dataset_name}/record", status_code=201)
    def insert_record(dataset_name: str, request: InsertRecordRequest) -> InsertRecordResponse:
        logger.info("POST /api/datasets/%s/record - Inserting record", dataset_name)
        if request.dataset_name is not None and request.dataset_name != dataset_name:
            logger.warning(
                "Dataset name mismatch. Path: %s, Body: %s", dataset_name, request.dataset_name
            )
        record = service.insert_record(dataset_name, request.data)
        return InsertRecordResponse(
            record_id=record.record_id,
            dataset_name=record.dataset_name,
            created_at=record.created_at,
        )

    @app.get("/api/datasets/{dataset_name}/query")
    def query(
        dataset_name: str,
        group_by: str | None = Query(default=None, alias="groupBy"),
        sort_by: str | None = Query(default=None, alias="sortBy"),
        order: str = Query(default="asc"),
    ) -> JSONResponse:
        logger.info(
            "GET /api/datasets/%s/query - groupBy: %s, sortBy: %s, order: %s",
            dataset_name,
            group_by,
            sort_by,
            order,
        )
        payload = service.query(
            dataset_name, group_by=group_by, sort_by=sort_by, sort_order=order
        )
        logger.info(
            "Query completed. Operation: %s, Records: %d",
            payload["operation"],
            payload["total_records"],
        )
        return JSONResponse(content=jsonable_encoder(payload))

    @app.get("/traces")
    def traces(limit: int = 20) -> dict[str, Any]:
        records = [asdict(record) for record in trace_store.list_recent(limit=limit)]
        return {"items": records}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: str) -> dict[str, Any]:
        try:
            record = trace_store.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return trace_store.summary()

    return app


_settings = AppSettings.from_env()
configure_logging(_settings.log_level)
app = create_app(_settings)

"""Dataset service: validation -> fetch -> query engine -> response payload."""

from __future__ import annotations

from typing import Any

from json_dataset.errors import DatasetServiceError, DatasetValidationError, InvalidJsonError
from json_dataset.obs.logger import get_logger
from json_dataset.obs.tracing import Timer, TraceStore
from json_dataset.query.engine import QueryEngine
from json_dataset.storage.record_store import RecordStore
from json_dataset.storage.validation import DatasetValidator, QueryIntent
from json_dataset.types import DatasetRecord, FieldPath

logger = get_logger(__name__)


class DatasetService:
    """Coordinates the record store and the query engine.

    Records are fetched once per query and handed to the engine as plain
    documents; the engine never sees store-level metadata such as record ids.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        validator: DatasetValidator | None = None,
        engine: QueryEngine | None = None,
        trace_store: TraceStore | None = None,
    ) -> None:
        self.store = store
        self.validator = validator or DatasetValidator()
        self.engine = engine or QueryEngine()
        self.trace_store = trace_store or TraceStore()

    def insert_record(self, dataset_name: str, data: Any) -> DatasetRecord:
        logger.info("Inserting record into dataset: %s", dataset_name)
        try:
            self.validator.validate_dataset_name(dataset_name)
        except InvalidJsonError as exc:
            logger.warning("Validation failed for dataset %s: %s", dataset_name, exc.message)
            raise DatasetValidationError(
                f"Dataset name validation failed: {exc.message}", details=exc.details
            ) from exc

        try:
            self.validator.validate_record_data(data, allow_empty=True)
        except InvalidJsonError as exc:
            logger.warning("Validation failed for dataset %s: %s", dataset_name, exc.message)
            raise

        record = self.store.insert(dataset_name, dict(data))
        logger.info(
            "Record inserted successfully. ID: %s, Dataset: %s",
            record.record_id,
            record.dataset_name,
        )
        return record

    def query(
        self,
        dataset_name: str,
        *,
        group_by: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> dict[str, Any]:
        """Validate and dispatch to group-by, sort-by, or group-then-sort.

        Every call is traced, including ones rejected by validation.
        """
        payload: dict[str, Any] | None = None
        error_code: str | None = None
        timer = Timer()
        try:
            with timer:
                intent = self.validator.validate_query(
                    dataset_name, group_by=group_by, sort_by=sort_by, sort_order=sort_order
                )
                operation = intent.operation
                if operation == "group_by_then_sort":
                    payload = self.group_by_then_sort(intent)
                elif operation == "group_by":
                    payload = self.group_by(intent)
                else:
                    payload = self.sort_by(intent)
        except DatasetServiceError as exc:
            error_code = exc.error_code
            logger.warning("Query validation failed: %s", exc.message)
            raise
        except Exception:
            error_code = "INTERNAL_ERROR"
            logger.exception("Unexpected error during query on dataset %s", dataset_name)
            raise
        finally:
            self.trace_store.create_record(
                dataset_name=dataset_name,
                operation=_requested_operation(group_by, sort_by),
                field=group_by if group_by is not None else sort_by,
                sort_field=sort_by if group_by is not None else None,
                total_records=payload["total_records"] if payload else 0,
                field_type=payload["sort_metadata"]["field_type"]
                if payload and "sort_metadata" in payload
                else None,
                latency_ms=timer.elapsed_ms,
                success=error_code is None,
                error_code=error_code,
            )
        return payload

    def group_by(self, intent: QueryIntent) -> dict[str, Any]:
        logger.info(
            "Executing group-by query on dataset: %s, field: %s",
            intent.dataset_name,
            intent.group_by,
        )
        group_path = FieldPath.parse(intent.group_by, dataset_name=intent.dataset_name)
        documents = self._fetch(intent.dataset_name)
        if not documents:
            return self.engine.build_empty_group_by_payload(intent.dataset_name, group_path.raw)

        result = self.engine.group_by(documents, group_path)
        payload = self.engine.build_group_by_payload(intent.dataset_name, group_path.raw, result)
        logger.info(
            "Group-by completed. Dataset: %s, Groups: %d, Total records: %d",
            intent.dataset_name,
            payload["metadata"]["total_groups"],
            payload["total_records"],
        )
        return payload

    def sort_by(self, intent: QueryIntent) -> dict[str, Any]:
        logger.info(
            "Executing sort-by query on dataset: %s, field: %s, order: %s",
            intent.dataset_name,
            intent.sort_by,
            intent.sort_order.value,
        )
        sort_path = FieldPath.parse(intent.sort_by, dataset_name=intent.dataset_name)
        documents = self._fetch(intent.dataset_name)
        if not documents:
            return self.engine.build_empty_sort_by_payload(
                intent.dataset_name, sort_path.raw, intent.sort_order
            )

        result = self.engine.sort_by(documents, sort_path, intent.sort_order)
        payload = self.engine.build_sort_by_payload(
            intent.dataset_name, sort_path.raw, intent.sort_order, result
        )
        logger.info(
            "Sort-by completed. Dataset: %s, Records: %d, Type: %s",
            intent.dataset_name,
            payload["total_records"],
            payload["sort_metadata"]["field_type"],
        )
        return payload

    def group_by_then_sort(self, intent: QueryIntent) -> dict[str, Any]:
        logger.info(
            "Executing group-by-then-sort query on dataset: %s, groupBy: %s, sortBy: %s, order: %s",
            intent.dataset_name,
            intent.group_by,
            intent.sort_by,
            intent.sort_order.value,
        )
        group_path = FieldPath.parse(intent.group_by, dataset_name=intent.dataset_name)
        sort_path = FieldPath.parse(intent.sort_by, dataset_name=intent.dataset_name)
        documents = self._fetch(intent.dataset_name)
        if not documents:
            return self.engine.build_empty_group_then_sort_payload(
                intent.dataset_name, group_path.raw, sort_path.raw, intent.sort_order
            )

        result, decisions = self.engine.group_then_sort(
            documents, group_path, sort_path, intent.sort_order
        )
        payload = self.engine.build_group_then_sort_payload(
            intent.dataset_name,
            group_path.raw,
            sort_path.raw,
            intent.sort_order,
            result,
            decisions,
        )
        logger.info(
            "Group-by-then-sort completed. Dataset: %s, Groups: %d, Total records: %d",
            intent.dataset_name,
            payload["metadata"]["total_groups"],
            payload["total_records"],
        )
        return payload

    def _fetch(self, dataset_name: str) -> list[dict[str, Any]]:
        records = self.store.find_active(dataset_name)
        if not records:
            logger.warning("Dataset '%s' has no records or doesn't exist", dataset_name)
        else:
            logger.debug("Found %d records in dataset '%s'", len(records), dataset_name)
        return [record.data for record in records]


def _requested_operation(group_by: str | None, sort_by: str | None) -> str:
    if group_by is not None and sort_by is not None:
        return "group_by_then_sort"
    if group_by is not None:
        return "group_by"
    if sort_by is not None:
        return "sort_by"
    return "none"

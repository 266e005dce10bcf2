"""Query orchestration: group-by, sort-by, and group-then-sort over one batch."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any

from json_dataset.config import QueryConfig
from json_dataset.obs.logger import get_logger
from json_dataset.query.comparators import make_comparator
from json_dataset.query.grouping import group_documents, is_sentinel_key
from json_dataset.query.inference import infer_field_type
from json_dataset.query.resolver import resolve_field
from json_dataset.types import (
    FieldPath,
    FieldType,
    FieldTypeDecision,
    GroupingResult,
    SortOrder,
    SortResult,
)

logger = get_logger(__name__)

Document = dict[str, Any]


class QueryEngine:
    """Runs field-driven queries over an in-memory batch of documents.

    The engine is stateless between calls: every method takes the documents it
    works on, parses its field paths before touching any document, and returns
    fresh containers without reordering or mutating the input list.
    """

    def __init__(self, config: QueryConfig | None = None) -> None:
        self.config = config or QueryConfig()

    def group_by(self, documents: list[Document], path: str | FieldPath) -> GroupingResult:
        field_path = _as_path(path)
        result = group_documents(documents, field_path)
        logger.debug(
            "Grouped %d documents by '%s' into %d groups (missing=%d, null=%d)",
            len(documents),
            field_path,
            len(result.groups),
            result.missing_count,
            result.null_count,
        )
        return result

    def sort_by(
        self,
        documents: list[Document],
        path: str | FieldPath,
        order: SortOrder = SortOrder.ASC,
    ) -> SortResult:
        field_path = _as_path(path)
        return self._sort(documents, field_path, order)

    def group_then_sort(
        self,
        documents: list[Document],
        group_path: str | FieldPath,
        sort_path: str | FieldPath,
        order: SortOrder = SortOrder.ASC,
    ) -> tuple[GroupingResult, dict[str, FieldTypeDecision]]:
        """Group, then sort each bucket with its own type inference."""
        group_field = _as_path(group_path)
        sort_field = _as_path(sort_path)

        grouping = group_documents(documents, group_field)
        sorted_groups: dict[str, list[Document]] = {}
        decisions: dict[str, FieldTypeDecision] = {}
        for key, bucket in grouping.groups.items():
            sorted_bucket = self._sort(bucket, sort_field, order)
            sorted_groups[key] = sorted_bucket.documents
            decisions[key] = sorted_bucket.decision

        return (
            GroupingResult(
                groups=sorted_groups,
                missing_count=grouping.missing_count,
                null_count=grouping.null_count,
            ),
            decisions,
        )

    def _sort(self, documents: list[Document], path: FieldPath, order: SortOrder) -> SortResult:
        extractions = [resolve_field(document, path) for document in documents]
        decision = infer_field_type(
            extractions,
            sample_size=self.config.sample_size,
            dominance_threshold=self.config.dominance_threshold,
        )
        logger.debug("Detected field type for '%s': %s", path, decision.field_type.value)

        compare = make_comparator(decision.field_type, order)
        # sorted() is stable, so equal keys keep their input order.
        ranked = sorted(
            zip(extractions, documents),
            key=cmp_to_key(lambda left, right: compare(left[0], right[0])),
        )
        return SortResult(documents=[document for _, document in ranked], decision=decision)

    # Payload assembly -------------------------------------------------------

    def build_group_by_payload(
        self,
        dataset_name: str,
        field: str,
        result: GroupingResult,
    ) -> dict[str, Any]:
        return {
            "success": True,
            "dataset_name": dataset_name,
            "operation": "group_by",
            "field": field,
            "total_records": _count_records(result),
            "groups": result.groups,
            "metadata": build_group_metadata(result),
        }

    def build_sort_by_payload(
        self,
        dataset_name: str,
        field: str,
        order: SortOrder,
        result: SortResult,
    ) -> dict[str, Any]:
        return {
            "success": True,
            "dataset_name": dataset_name,
            "operation": "sort_by",
            "field": field,
            "total_records": len(result.documents),
            "results": result.documents,
            "sort_metadata": build_sort_metadata(order, result.decision),
        }

    def build_group_then_sort_payload(
        self,
        dataset_name: str,
        group_field: str,
        sort_field: str,
        order: SortOrder,
        result: GroupingResult,
        decisions: dict[str, FieldTypeDecision],
    ) -> dict[str, Any]:
        # Per-group inference can disagree between buckets, so the dataset
        # level always reports "mixed".
        merged = FieldTypeDecision(
            field_type=FieldType.MIXED,
            missing_count=sum(d.missing_count for d in decisions.values()),
            null_count=sum(d.null_count for d in decisions.values()),
            type_mismatch_count=sum(d.type_mismatch_count for d in decisions.values()),
            warnings=(
                f"Records grouped by '{group_field}', then sorted by '{sort_field}' "
                "within each group",
            ),
        )
        return {
            "success": True,
            "dataset_name": dataset_name,
            "operation": "group_by_then_sort",
            "field": group_field,
            "sort_field": sort_field,
            "total_records": _count_records(result),
            "groups": result.groups,
            "metadata": build_group_metadata(result),
            "sort_metadata": build_sort_metadata(order, merged),
        }

    def build_empty_group_by_payload(self, dataset_name: str, field: str) -> dict[str, Any]:
        return self.build_group_by_payload(dataset_name, field, GroupingResult(groups={}))

    def build_empty_sort_by_payload(
        self, dataset_name: str, field: str, order: SortOrder
    ) -> dict[str, Any]:
        return self.build_sort_by_payload(
            dataset_name, field, order, SortResult(documents=[], decision=_EMPTY_DECISION)
        )

    def build_empty_group_then_sort_payload(
        self,
        dataset_name: str,
        group_field: str,
        sort_field: str,
        order: SortOrder,
    ) -> dict[str, Any]:
        payload = self.build_group_by_payload(dataset_name, group_field, GroupingResult(groups={}))
        payload["operation"] = "group_by_then_sort"
        payload["sort_field"] = sort_field
        payload["sort_metadata"] = build_sort_metadata(order, _EMPTY_DECISION)
        return payload


_EMPTY_DECISION = FieldTypeDecision(field_type=FieldType.UNKNOWN, warnings=("Dataset is empty",))


def build_group_metadata(result: GroupingResult) -> dict[str, Any]:
    group_sizes = {
        key: len(bucket) for key, bucket in result.groups.items() if not is_sentinel_key(key)
    }
    return {
        "total_groups": len(group_sizes),
        "records_with_missing_field": result.missing_count,
        "records_with_null_field": result.null_count,
        "group_sizes": group_sizes,
    }


def build_sort_metadata(order: SortOrder, decision: FieldTypeDecision) -> dict[str, Any]:
    return {
        "sort_order": order.value,
        "field_type": decision.field_type.value,
        "records_with_missing_field": decision.missing_count,
        "records_with_null_field": decision.null_count,
        "records_with_type_mismatch": decision.type_mismatch_count,
        "warnings": list(decision.warnings),
    }


def _count_records(result: GroupingResult) -> int:
    return sum(len(bucket) for bucket in result.groups.values())


def _as_path(path: str | FieldPath) -> FieldPath:
    return path if isinstance(path, FieldPath) else FieldPath.parse(path)

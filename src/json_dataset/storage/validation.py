"""Validation of dataset names, record payloads, and query intents."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from json_dataset.config import StoreConfig
from json_dataset.errors import InvalidFieldError, InvalidJsonError
from json_dataset.obs.logger import get_logger
from json_dataset.types import SortOrder

logger = get_logger(__name__)

_DATASET_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_-]*$")


@dataclass(frozen=True, slots=True)
class QueryIntent:
    """A query request that passed validation."""

    dataset_name: str
    group_by: str | None
    sort_by: str | None
    sort_order: SortOrder = SortOrder.ASC

    @property
    def operation(self) -> str:
        if self.group_by is not None and self.sort_by is not None:
            return "group_by_then_sort"
        if self.group_by is not None:
            return "group_by"
        return "sort_by"


class DatasetValidator:
    """Checks inputs before they reach the store or the query engine."""

    def __init__(self, config: StoreConfig | None = None) -> None:
        self.config = config or StoreConfig()

    def validate_dataset_name(self, dataset_name: str | None) -> None:
        if dataset_name is None or not dataset_name.strip():
            raise InvalidJsonError("Dataset name cannot be null or blank")

        errors: list[str] = []
        max_length = self.config.max_dataset_name_length
        if len(dataset_name) > max_length:
            errors.append(f"Dataset name exceeds maximum length of {max_length} characters")
        if not _DATASET_NAME_PATTERN.match(dataset_name):
            errors.append(
                "Dataset name must start with letter or underscore and contain only "
                "alphanumeric characters, underscores, or hyphens"
            )
        if errors:
            raise InvalidJsonError(
                "Dataset name validation failed: " + "; ".join(errors), details=errors
            )

    def validate_record_data(self, data: Any, *, allow_empty: bool = True) -> None:
        if data is None:
            raise InvalidJsonError("JSON data cannot be null")
        if not isinstance(data, Mapping):
            raise InvalidJsonError("JSON data must be an object")

        errors: list[str] = []
        if not allow_empty and not data:
            errors.append("JSON data cannot be empty")
        if any(not isinstance(key, str) or not key.strip() for key in data):
            errors.append("JSON keys cannot be null or blank")
        try:
            serialized = json.dumps(data, allow_nan=False)
        except (TypeError, ValueError) as exc:
            errors.append(f"JSON data is not serializable: {exc}")
        else:
            logger.debug("JSON validation successful. Serialized length: %d chars", len(serialized))

        if errors:
            raise InvalidJsonError("JSON validation failed: " + "; ".join(errors), details=errors)

    def validate_query(
        self,
        dataset_name: str | None,
        *,
        group_by: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> QueryIntent:
        """Validate a raw query and return the normalized intent.

        Field paths are only checked for presence here; the engine re-parses
        them before scanning records.
        """
        if dataset_name is None or not dataset_name.strip():
            raise InvalidJsonError("Query request is invalid")
        if group_by is None and sort_by is None:
            raise InvalidJsonError(
                "At least one query parameter (groupBy or sortBy) must be provided"
            )
        if group_by is not None and not group_by.strip():
            raise InvalidFieldError(group_by, dataset_name, "Group-by field is required")
        if sort_by is not None and not sort_by.strip():
            raise InvalidFieldError(sort_by, dataset_name, "Sort-by field is required")

        self.validate_dataset_name(dataset_name)
        order = SortOrder.parse(sort_order, dataset_name=dataset_name)
        return QueryIntent(
            dataset_name=dataset_name,
            group_by=group_by,
            sort_by=sort_by,
            sort_order=order,
        )

"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from json_dataset.errors import InvalidFieldError, InvalidSortOrderError


class ValueType(str, Enum):
    """Structural classification of one JSON value."""

    NULL = "null"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


class FieldType(str, Enum):
    """Comparison strategy chosen for a sort field.

    `UNKNOWN` is only reported for empty datasets, where nothing was inferred.
    """

    NUMERIC = "numeric"
    STRING = "string"
    BOOLEAN = "boolean"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, token: str | None, *, dataset_name: str | None = None) -> "SortOrder":
        """Parse a user-supplied order token; `None` means ascending."""
        if token is None:
            return cls.ASC
        normalized = token.strip().lower()
        if normalized in ("asc", "ascending"):
            return cls.ASC
        if normalized in ("desc", "descending"):
            return cls.DESC
        raise InvalidSortOrderError(token, dataset_name)

    @property
    def is_descending(self) -> bool:
        return self is SortOrder.DESC


@dataclass(frozen=True, slots=True)
class FieldPath:
    """A dot-delimited address into a nested document."""

    raw: str
    segments: tuple[str, ...]

    @classmethod
    def parse(cls, raw: str | None, *, dataset_name: str | None = None) -> "FieldPath":
        if raw is None or not raw.strip():
            raise InvalidFieldError(
                raw, dataset_name or "", "Field name cannot be null or empty"
            )
        return cls(raw=raw, segments=tuple(raw.split(".")))

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True, slots=True)
class FieldExtraction:
    """Outcome of resolving a field path: absent, or present with a value (maybe None)."""

    exists: bool
    value: Any = None

    @classmethod
    def found(cls, value: Any) -> "FieldExtraction":
        return cls(exists=True, value=value)

    @classmethod
    def missing(cls) -> "FieldExtraction":
        return cls(exists=False, value=None)

    @property
    def is_null(self) -> bool:
        return self.exists and self.value is None

    @property
    def is_null_or_missing(self) -> bool:
        return not self.exists or self.value is None


@dataclass(frozen=True, slots=True)
class FieldTypeDecision:
    """Inferred sort strategy for one field plus diagnostic counters."""

    field_type: FieldType
    missing_count: int = 0
    null_count: int = 0
    type_mismatch_count: int = 0
    warnings: tuple[str, ...] = ()
    type_counts: tuple[tuple[ValueType, int], ...] = ()


@dataclass(slots=True)
class DatasetRecord:
    """A stored JSON document belonging to one dataset."""

    record_id: str
    dataset_name: str
    data: dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_deleted: bool = False
    version: int = 1


@dataclass(slots=True)
class GroupingResult:
    """Documents bucketed by group key, in first-seen key order."""

    groups: dict[str, list[dict[str, Any]]]
    missing_count: int = 0
    null_count: int = 0


@dataclass(slots=True)
class SortResult:
    """Documents in sorted order with the inference that drove the comparison."""

    documents: list[dict[str, Any]]
    decision: FieldTypeDecision

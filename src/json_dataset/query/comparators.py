"""Comparators over field extractions with null/missing always last."""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

from json_dataset.obs.logger import get_logger
from json_dataset.query.resolver import classify_value, value_to_text
from json_dataset.types import FieldExtraction, FieldType, SortOrder, ValueType

logger = get_logger(__name__)

Comparator = Callable[[FieldExtraction, FieldExtraction], int]

_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a native number or numeric-looking string; `None` when impossible."""
    value_type = classify_value(value)
    if value_type is ValueType.NUMBER:
        if isinstance(value, Decimal):
            return value if value.is_finite() else None
        if isinstance(value, int):
            return Decimal(value)
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            # str() keeps the shortest float repr, e.g. 0.1 -> Decimal("0.1")
            return Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None
    if value_type is ValueType.STRING and _DECIMAL_LITERAL.fullmatch(value):
        return Decimal(value)
    return None


def compare_numeric(left: Any, right: Any) -> int:
    left_number = to_decimal(left)
    right_number = to_decimal(right)
    if left_number is None or right_number is None:
        logger.debug(
            "Numeric coercion failed for %r / %r, comparing as text", left, right
        )
        left_text, right_text = value_to_text(left), value_to_text(right)
        return (left_text > right_text) - (left_text < right_text)
    return (left_number > right_number) - (left_number < right_number)


def compare_string(left: Any, right: Any) -> int:
    left_text = value_to_text(left).lower()
    right_text = value_to_text(right).lower()
    return (left_text > right_text) - (left_text < right_text)


def compare_boolean(left: Any, right: Any) -> int:
    left_is_bool = isinstance(left, bool)
    right_is_bool = isinstance(right, bool)
    if left_is_bool and right_is_bool:
        return int(left) - int(right)
    # Stray non-boolean values sort after booleans, among themselves as text.
    if left_is_bool:
        return -1
    if right_is_bool:
        return 1
    return compare_string(left, right)


def compare_mixed(left: Any, right: Any) -> int:
    return compare_string(left, right)


_VALUE_COMPARATORS: dict[FieldType, Callable[[Any, Any], int]] = {
    FieldType.NUMERIC: compare_numeric,
    FieldType.STRING: compare_string,
    FieldType.BOOLEAN: compare_boolean,
    FieldType.MIXED: compare_mixed,
    FieldType.UNKNOWN: compare_mixed,
}


def compare_null_or_missing_last(left: FieldExtraction, right: FieldExtraction) -> int:
    left_absent = left.is_null_or_missing
    right_absent = right.is_null_or_missing
    if left_absent and right_absent:
        return 0
    if left_absent:
        return 1
    if right_absent:
        return -1
    return 0


def make_comparator(field_type: FieldType, order: SortOrder = SortOrder.ASC) -> Comparator:
    """Build a total-order comparator for `field_type`.

    Null and missing values sort last in both directions; `order` only flips
    the comparison between present values.
    """
    compare_values = _VALUE_COMPARATORS[field_type]
    direction = -1 if order.is_descending else 1

    def _compare(left: FieldExtraction, right: FieldExtraction) -> int:
        if left.is_null_or_missing or right.is_null_or_missing:
            return compare_null_or_missing_last(left, right)
        return direction * compare_values(left.value, right.value)

    return _compare

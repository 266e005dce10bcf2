"""Group key canonicalization and record bucketing."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from json_dataset.query.resolver import classify_value, resolve_field, value_to_text
from json_dataset.types import FieldExtraction, FieldPath, GroupingResult, ValueType

MISSING_GROUP_KEY = "__missing__"
NULL_GROUP_KEY = "__null__"
SENTINEL_GROUP_KEYS = frozenset({MISSING_GROUP_KEY, NULL_GROUP_KEY})


def group_key(extraction: FieldExtraction) -> str:
    """Derive the bucket key for one extraction.

    Strings keep their exact case. Arrays join their elements' text with ", "
    in original order, objects render as sorted-key JSON. A stored string equal
    to a sentinel shares the sentinel's bucket.
    """
    if not extraction.exists:
        return MISSING_GROUP_KEY
    value = extraction.value
    if value is None:
        return NULL_GROUP_KEY
    if classify_value(value) is ValueType.ARRAY:
        return ", ".join(value_to_text(item) for item in value)
    return value_to_text(value)


def is_sentinel_key(key: str) -> bool:
    return key in SENTINEL_GROUP_KEYS


def group_documents(
    documents: Iterable[dict[str, Any]],
    path: str | FieldPath,
) -> GroupingResult:
    field_path = path if isinstance(path, FieldPath) else FieldPath.parse(path)

    groups: dict[str, list[dict[str, Any]]] = {}
    missing_count = 0
    null_count = 0

    for document in documents:
        extraction = resolve_field(document, field_path)
        if not extraction.exists:
            missing_count += 1
        elif extraction.value is None:
            null_count += 1
        groups.setdefault(group_key(extraction), []).append(document)

    return GroupingResult(groups=groups, missing_count=missing_count, null_count=null_count)

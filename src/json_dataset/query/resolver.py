"""Field path resolution and structural value classification."""

from __future__ import annotations

import json
from collections.abc import Mapping
from decimal import Decimal
from numbers import Number
from typing import Any

from json_dataset.types import FieldExtraction, FieldPath, ValueType


def resolve_field(document: Mapping[str, Any], path: str | FieldPath) -> FieldExtraction:
    """Walk `path` through nested mappings of `document`.

    Any step that lands on a non-mapping node or an absent key yields a missing
    extraction. A `None` stored at the final segment is a found null, which is
    distinct from missing.
    """
    field_path = path if isinstance(path, FieldPath) else FieldPath.parse(path)

    current: Any = document
    for segment in field_path.segments:
        if not isinstance(current, Mapping) or segment not in current:
            return FieldExtraction.missing()
        current = current[segment]

    return FieldExtraction.found(current)


def classify_value(value: Any) -> ValueType:
    if value is None:
        return ValueType.NULL
    # bool before Number: bool is an int subclass.
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, Number):
        return ValueType.NUMBER
    if isinstance(value, str):
        return ValueType.STRING
    if isinstance(value, (list, tuple)):
        return ValueType.ARRAY
    if isinstance(value, Mapping):
        return ValueType.OBJECT
    return ValueType.UNKNOWN


def value_to_text(value: Any) -> str:
    """Render a JSON value as text for comparison and group keys."""
    value_type = classify_value(value)
    if value_type is ValueType.STRING:
        return value
    if value_type is ValueType.NULL:
        return "null"
    if value_type is ValueType.BOOLEAN:
        return "true" if value else "false"
    if value_type is ValueType.NUMBER:
        return str(value)
    if value_type in (ValueType.ARRAY, ValueType.OBJECT):
        return canonical_json(value)
    return str(value)


def canonical_json(value: Any) -> str:
    """Sorted-key JSON; structurally equal values always render identically."""
    return json.dumps(value, sort_keys=True, ensure_ascii=False, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value) if value != value.to_integral_value() else int(value)
    return str(value)

"""Sample-based type inference for sort fields."""

from __future__ import annotations

from collections.abc import Iterable

from json_dataset.query.resolver import classify_value
from json_dataset.types import FieldExtraction, FieldType, FieldTypeDecision, ValueType

DEFAULT_SAMPLE_SIZE = 10
DEFAULT_DOMINANCE_THRESHOLD = 0.8

_FIELD_TYPE_BY_VALUE_TYPE = {
    ValueType.NUMBER: FieldType.NUMERIC,
    ValueType.STRING: FieldType.STRING,
    ValueType.BOOLEAN: FieldType.BOOLEAN,
}


def infer_field_type(
    extractions: Iterable[FieldExtraction],
    *,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    dominance_threshold: float = DEFAULT_DOMINANCE_THRESHOLD,
) -> FieldTypeDecision:
    """Decide one comparison strategy for a field.

    Only the first `sample_size` present, non-null values vote on the type.
    Every extraction is still scanned so missing/null counts cover the whole
    batch. A type wins outright when it is the only one seen or holds at least
    `dominance_threshold` of the votes; otherwise the field is mixed and sorted
    as strings.
    """
    votes: dict[ValueType, int] = {}
    sampled = 0
    missing_count = 0
    null_count = 0

    for extraction in extractions:
        if not extraction.exists:
            missing_count += 1
            continue
        if extraction.value is None:
            null_count += 1
            continue
        if sampled >= sample_size:
            continue
        value_type = classify_value(extraction.value)
        votes[value_type] = votes.get(value_type, 0) + 1
        sampled += 1

    if not votes:
        return FieldTypeDecision(
            field_type=FieldType.MIXED,
            missing_count=missing_count,
            null_count=null_count,
            warnings=("All values are null or missing",),
        )

    predominant_type = max(votes, key=votes.__getitem__)
    predominant_votes = votes[predominant_type]
    warnings: list[str] = []

    if len(votes) == 1 or predominant_votes >= sampled * dominance_threshold:
        field_type = _FIELD_TYPE_BY_VALUE_TYPE.get(predominant_type, FieldType.MIXED)
    else:
        field_type = FieldType.MIXED
        warnings.append(
            f"Field contains mixed types ({format_type_counts(votes)}). Sorting as strings."
        )

    if null_count > 0:
        warnings.append(f"{null_count} records have null values (sorted to end)")
    if missing_count > 0:
        warnings.append(f"{missing_count} records missing the field (sorted to end)")

    return FieldTypeDecision(
        field_type=field_type,
        missing_count=missing_count,
        null_count=null_count,
        type_mismatch_count=sampled - predominant_votes,
        warnings=tuple(warnings),
        type_counts=tuple(votes.items()),
    )


def format_type_counts(votes: dict[ValueType, int]) -> str:
    return ", ".join(f"{value_type.value}:{count}" for value_type, count in votes.items())

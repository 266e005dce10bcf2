import pytest

from json_dataset.config import StoreConfig
from json_dataset.errors import InvalidFieldError, InvalidJsonError, InvalidSortOrderError
from json_dataset.storage.validation import DatasetValidator
from json_dataset.types import SortOrder


@pytest.mark.parametrize("name", ["employees", "_staging", "sales-2024", "A1_b-c"])
def test_valid_dataset_names(name: str) -> None:
    DatasetValidator().validate_dataset_name(name)


@pytest.mark.parametrize("name", ["1abc", "has space", "bad.name", "-lead"])
def test_invalid_dataset_names(name: str) -> None:
    with pytest.raises(InvalidJsonError) as exc_info:
        DatasetValidator().validate_dataset_name(name)
    assert exc_info.value.details


def test_dataset_name_length_limit_is_configurable() -> None:
    validator = DatasetValidator(StoreConfig(max_dataset_name_length=5))

    with pytest.raises(InvalidJsonError, match="maximum length of 5"):
        validator.validate_dataset_name("abcdef")


def test_record_data_rules() -> None:
    validator = DatasetValidator()

    validator.validate_record_data({})
    validator.validate_record_data({"nested": {"list": [1, None, "x"]}})
    with pytest.raises(InvalidJsonError):
        validator.validate_record_data({}, allow_empty=False)
    with pytest.raises(InvalidJsonError):
        validator.validate_record_data({" ": 1})
    with pytest.raises(InvalidJsonError):
        validator.validate_record_data([1, 2])
    with pytest.raises(InvalidJsonError):
        validator.validate_record_data({"when": object()})


def test_validate_query_requires_an_operation() -> None:
    with pytest.raises(InvalidJsonError):
        DatasetValidator().validate_query("people")


def test_validate_query_rejects_blank_paths() -> None:
    with pytest.raises(InvalidFieldError):
        DatasetValidator().validate_query("people", group_by="  ")
    with pytest.raises(InvalidFieldError):
        DatasetValidator().validate_query("people", group_by="team", sort_by="")


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        (None, SortOrder.ASC),
        ("asc", SortOrder.ASC),
        ("ASCENDING", SortOrder.ASC),
        (" Desc ", SortOrder.DESC),
        ("descending", SortOrder.DESC),
    ],
)
def test_sort_order_tokens(token: str | None, expected: SortOrder) -> None:
    intent = DatasetValidator().validate_query("people", sort_by="age", sort_order=token)

    assert intent.sort_order is expected
    assert intent.operation == "sort_by"


def test_invalid_sort_order() -> None:
    with pytest.raises(InvalidSortOrderError):
        DatasetValidator().validate_query("people", sort_by="age", sort_order="up")


def test_intent_operation_dispatch() -> None:
    validator = DatasetValidator()

    assert validator.validate_query("p", group_by="a").operation == "group_by"
    assert validator.validate_query("p", group_by="a", sort_by="b").operation == "group_by_then_sort"

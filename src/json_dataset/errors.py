"""Error taxonomy shared by the engine, service, and API layers."""

from __future__ import annotations


class DatasetServiceError(Exception):
    """Base class for caller-visible, input-dependent failures."""

    error_code = "DATASET_ERROR"
    http_status = 400

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidJsonError(DatasetServiceError):
    """Malformed request payload or query without any operation."""

    error_code = "INVALID_JSON"


class DatasetValidationError(DatasetServiceError):
    """Dataset name rejected while inserting a record."""

    error_code = "DATASET_VALIDATION_ERROR"


class InvalidFieldError(DatasetServiceError):
    """A group-by or sort-by field path is absent or blank."""

    error_code = "INVALID_FIELD"

    def __init__(
        self,
        field_name: str | None,
        dataset_name: str | None = None,
        message: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.dataset_name = dataset_name
        super().__init__(
            message or f"Invalid or missing field '{field_name}' in dataset '{dataset_name}'",
            details=[f"Field '{field_name}' in dataset '{dataset_name}' is invalid"],
        )


class InvalidSortOrderError(DatasetServiceError):
    """Sort order token is not asc/ascending/desc/descending."""

    error_code = "INVALID_SORT_ORDER"

    def __init__(self, sort_order: str | None, dataset_name: str | None = None) -> None:
        self.sort_order = sort_order
        self.dataset_name = dataset_name
        super().__init__(
            f"Invalid sort order: {sort_order}. Must be 'asc' or 'desc'",
            details=["Valid sort orders: 'asc' (ascending) or 'desc' (descending)"],
        )


class DatasetNotFoundError(DatasetServiceError):
    """Reserved for lookups of datasets that must exist."""

    error_code = "DATASET_NOT_FOUND"
    http_status = 404

    def __init__(self, dataset_name: str, message: str | None = None) -> None:
        self.dataset_name = dataset_name
        super().__init__(
            message or f"Dataset not found: {dataset_name}",
            details=[f"Dataset '{dataset_name}' does not exist or has no records"],
        )

"""Configuration models for the dataset query service."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class QueryConfig(BaseModel):
    """Configures sort-field type inference."""

    sample_size: int = Field(default=10, ge=1)
    dominance_threshold: float = Field(default=0.8, gt=0.0, le=1.0)


class StoreConfig(BaseModel):
    """Configures record persistence and dataset-name rules."""

    backend: Literal["memory", "sqlite"] = "memory"
    sqlite_path: str = "json_dataset.db"
    max_dataset_name_length: int = Field(default=255, ge=1)


class AppSettings(BaseModel):
    """Top-level settings assembled for the API process."""

    query: QueryConfig = Field(default_factory=QueryConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Build settings from `JSON_DATASET_*` variables; pydantic coerces the strings."""
        try:
            query = QueryConfig(
                sample_size=os.getenv("JSON_DATASET_SAMPLE_SIZE", "10"),  # type: ignore[arg-type]
                dominance_threshold=os.getenv(  # type: ignore[arg-type]
                    "JSON_DATASET_DOMINANCE_THRESHOLD", "0.8"
                ),
            )
            store = StoreConfig(
                backend=os.getenv("JSON_DATASET_STORE", "memory"),  # type: ignore[arg-type]
                sqlite_path=os.getenv("JSON_DATASET_SQLITE_PATH", "json_dataset.db"),
            )
        except ValidationError as exc:
            raise ValueError(f"Invalid JSON_DATASET_* environment settings: {exc}") from exc
        return cls(
            query=query,
            store=store,
            log_level=os.getenv("JSON_DATASET_LOG_LEVEL", "INFO"),
        )

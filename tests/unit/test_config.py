import pytest

from json_dataset.config import AppSettings


def test_from_env_reads_query_and_store_settings(monkeypatch) -> None:
    monkeypatch.setenv("JSON_DATASET_SAMPLE_SIZE", "25")
    monkeypatch.setenv("JSON_DATASET_DOMINANCE_THRESHOLD", "0.6")
    monkeypatch.setenv("JSON_DATASET_STORE", "sqlite")
    monkeypatch.setenv("JSON_DATASET_SQLITE_PATH", "/tmp/records.db")

    settings = AppSettings.from_env()

    assert settings.query.sample_size == 25
    assert settings.query.dominance_threshold == pytest.approx(0.6)
    assert settings.store.backend == "sqlite"
    assert settings.store.sqlite_path == "/tmp/records.db"


def test_from_env_defaults(monkeypatch) -> None:
    for name in (
        "JSON_DATASET_SAMPLE_SIZE",
        "JSON_DATASET_DOMINANCE_THRESHOLD",
        "JSON_DATASET_STORE",
        "JSON_DATASET_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = AppSettings.from_env()

    assert settings.query.sample_size == 10
    assert settings.query.dominance_threshold == pytest.approx(0.8)
    assert settings.store.backend == "memory"
    assert settings.log_level == "INFO"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("JSON_DATASET_STORE", "postgres"),
        ("JSON_DATASET_DOMINANCE_THRESHOLD", "1.5"),
        ("JSON_DATASET_SAMPLE_SIZE", "ten"),
    ],
)
def test_from_env_rejects_bad_values_with_clear_message(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match="Invalid JSON_DATASET_\\* environment settings"):
        AppSettings.from_env()

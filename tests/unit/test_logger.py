import logging

import pytest

from json_dataset.obs.logger import configure_logging, get_logger


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _emitting_handlers(logger: logging.Logger) -> list[logging.Handler]:
    found: list[logging.Handler] = []
    current: logging.Logger | None = logger
    while current is not None:
        found.extend(
            handler
            for handler in current.handlers
            if type(handler) in (logging.StreamHandler, logging.FileHandler)
        )
        if not current.propagate:
            break
        current = current.parent
    return found


def test_configure_logging_drops_module_handlers(restore_root_logger) -> None:
    service_logger = logging.getLogger("json_dataset.tests.service")
    service_logger.addHandler(logging.StreamHandler())

    configure_logging("DEBUG")

    assert service_logger.handlers == []
    assert service_logger.level == logging.DEBUG
    assert len(_emitting_handlers(service_logger)) == 1


def test_each_record_is_written_once(restore_root_logger, tmp_path) -> None:
    log_file = tmp_path / "service.log"
    before = get_logger("json_dataset.tests.before")

    configure_logging("INFO", fmt="%(message)s", log_file=str(log_file))
    after = get_logger("json_dataset.tests.after")
    before.info("query-line-before")
    after.info("query-line-after")

    lines = log_file.read_text().splitlines()
    assert lines.count("query-line-before") == 1
    assert lines.count("query-line-after") == 1
    assert len(_emitting_handlers(before)) == 2
    assert len(_emitting_handlers(after)) == 2

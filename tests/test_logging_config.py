import logging

import pytest

from event_finder.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_log_file_receives_records(tmp_path, monkeypatch):
    log_file = tmp_path / "logs" / "event_finder.log"
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FILE", str(log_file))

    level = configure_logging()
    logging.getLogger("event_finder.tests").info("favorite added")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert level == logging.DEBUG
    contents = log_file.read_text(encoding="utf-8")
    assert "[INFO] event_finder.tests: favorite added" in contents


def test_httpx_is_quieted_above_debug(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.delenv("LOG_FILE", raising=False)

    configure_logging()

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("event_finder").level == logging.INFO


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    monkeypatch.delenv("LOG_FILE", raising=False)

    assert configure_logging() == logging.INFO

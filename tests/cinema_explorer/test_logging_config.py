import io
import json
import logging

import pytest
from pythonjsonlogger import jsonlogger

from cinema_explorer.logging_config import configure_logging


@pytest.fixture
def root_logger(monkeypatch):
    monkeypatch.delenv("CINEMA_EXPLORER_LOG_FORMAT", raising=False)
    monkeypatch.delenv("CINEMA_EXPLORER_LOG_LEVEL", raising=False)
    logger = logging.getLogger()
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_json_is_the_default(root_logger):
    handler = configure_logging()

    assert root_logger.handlers == [handler]
    assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert root_logger.level == logging.INFO


def test_json_lines_carry_extra_context(root_logger):
    stream = io.StringIO()
    configure_logging(stream=stream)

    logging.getLogger("cinema_explorer.test").info("Loaded database", extra={"dataset": "sphere", "rows": 2})

    record = json.loads(stream.getvalue().splitlines()[-1])
    assert record["message"] == "Loaded database"
    assert record["level"] == "INFO"
    assert record["name"] == "cinema_explorer.test"
    assert (record["dataset"], record["rows"]) == ("sphere", 2)


def test_env_vars_select_plain_text_and_level(root_logger, monkeypatch):
    monkeypatch.setenv("CINEMA_EXPLORER_LOG_FORMAT", "plain")
    monkeypatch.setenv("CINEMA_EXPLORER_LOG_LEVEL", "debug")
    stream = io.StringIO()

    configure_logging(stream=stream)
    logging.getLogger("cinema_explorer.test").debug("Scheduling index redraw")

    assert not isinstance(root_logger.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert root_logger.level == logging.DEBUG
    assert "[DEBUG] cinema_explorer.test: Scheduling index redraw" in stream.getvalue()


def test_arguments_win_over_env(root_logger, monkeypatch):
    monkeypatch.setenv("CINEMA_EXPLORER_LOG_FORMAT", "plain")
    monkeypatch.setenv("CINEMA_EXPLORER_LOG_LEVEL", "DEBUG")

    configure_logging(level=logging.WARNING, force_format="JSON")

    assert isinstance(root_logger.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert root_logger.level == logging.WARNING


def test_unknown_format_or_level_is_rejected(root_logger, monkeypatch):
    with pytest.raises(ValueError):
        configure_logging(force_format="xml")

    monkeypatch.setenv("CINEMA_EXPLORER_LOG_LEVEL", "LOUD")
    with pytest.raises(ValueError):
        configure_logging()

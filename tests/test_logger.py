import json
import logging

import pytest

from tldr_crawler.utils.config import LoggingConfig
from tldr_crawler.utils.logger import JSONFormatter, get_crawler_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def capture(logger_name: str):
    records = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    handler = ListHandler()
    logging.getLogger(logger_name).addHandler(handler)
    return records, handler


def test_adapter_attaches_context_fields():
    records, handler = capture("tests.adapter")
    try:
        logger = get_crawler_logger("tests.adapter", worker="worker-0")
        logger.warning("plain")
        logger.log_url_event(logging.WARNING, "https://x.test/p1", "failed")
    finally:
        logging.getLogger("tests.adapter").removeHandler(handler)

    assert records[0].extra_fields == {"worker": "worker-0"}
    assert records[1].extra_fields == {
        "worker": "worker-0",
        "url": "https://x.test/p1",
        "event_type": "url_event",
    }


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("tldr", logging.INFO, __file__, 10, "hello %s", ("world",), None)
    record.extra_fields = {"worker": "worker-1"}
    entry = json.loads(JSONFormatter().format(record))
    assert entry["message"] == "hello world"
    assert entry["level"] == "INFO"
    assert entry["worker"] == "worker-1"


def test_setup_logging_console_only(restore_root_logger):
    root = setup_logging(LoggingConfig(level="DEBUG"))
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert logging.getLogger("aiohttp").level == logging.WARNING


def test_setup_logging_with_json_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "crawler.log"
    root = setup_logging(LoggingConfig(level="INFO", file=str(log_file), json=True))
    assert len(root.handlers) == 2
    assert all(isinstance(h.formatter, JSONFormatter) for h in root.handlers)

    logging.getLogger("tldr_crawler.test").info("written")
    for handler in root.handlers:
        handler.flush()
    assert json.loads(log_file.read_text().splitlines()[-1])["message"] == "written"

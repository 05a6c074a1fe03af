"""Test logging configuration.

Tests for maketargets.utils.logging_config:
    - Repeated setup_logging() calls don't duplicate handlers
    - Console handler can be disabled or uncolored
    - Context fields appear in human and JSON records
    - pop_context() removes fields
    - timer() reports elapsed time to a sink

Run:
    pytest tests/test_logging.py -v
"""

import json
import logging

import pytest

from maketargets.utils import logging_config
from maketargets.utils.profiler import timer


@pytest.fixture(autouse=True)
def clean_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    logging_config.pop_context()
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging_config.pop_context()


def record(msg="Wrote tv_rings_010.png"):
    return logging.LogRecord("maketargets", logging.INFO, __file__, 1, msg, None, None)


def test_setup_logging_idempotent(tmp_path):
    log_file = tmp_path / "run.log"
    logging_config.setup_logging("INFO", str(log_file), to_stderr=True)
    handlers = logging_config.setup_logging("INFO", str(log_file), to_stderr=True)

    root = logging.getLogger()
    assert len(handlers) == 2
    assert sum(1 for h in root.handlers if h in handlers) == 2
    assert not [h for h in root.handlers if isinstance(h, logging.FileHandler) and h not in handlers]


def test_file_logging_json(tmp_path):
    log_file = tmp_path / "logs" / "run.jsonl"
    logging_config.setup_logging(
        "DEBUG", str(log_file), json=True, to_stderr=False, context={"app": "maketargets"},
    )
    logging.getLogger("maketargets.test").info("hello %d", 3)
    for handler in logging.getLogger().handlers:
        handler.flush()

    line = log_file.read_text().strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["msg"] == "hello 3"
    assert payload["lvl"] == "INFO"
    assert payload["app"] == "maketargets"


def test_human_format_includes_context():
    logging_config.push_context(app="maketargets", worker=3)
    line = logging_config.ContextFormatter("human", use_color=False).format(record())
    assert "| INFO     | app=maketargets worker=3 | Wrote tv_rings_010.png" in line

    logging_config.pop_context(["worker"])
    assert logging_config.get_context() == {"app": "maketargets"}
    line = logging_config.ContextFormatter("human", use_color=False).format(record())
    assert "worker" not in line


def test_timer_sink():
    seen = []
    with timer("job", sink=lambda name, s: seen.append((name, s))):
        pass
    assert len(seen) == 1
    assert seen[0][0] == "job"
    assert seen[0][1] >= 0.0


def test_console_handler_options():
    assert logging_config.setup_logging("INFO", to_stderr=False) == []

    handlers = logging_config.setup_logging("WARNING", color=False)
    assert len(handlers) == 1
    assert handlers[0].formatter.use_color is False
    assert logging.getLogger().level == logging.WARNING

import logging

import structlog

from tokenforge.logging_config import setup_logging
from tokenforge.middleware.logging_middleware import _level_for


def test_setup_logging_sets_root_level():
    setup_logging("WARNING")

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)


def test_noisy_loggers_quieted():
    setup_logging("DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger().level == logging.DEBUG


def test_json_output(capsys):
    setup_logging("INFO", json_logs=True)

    logging.getLogger("tokenforge.test").info("hello")

    assert '"event": "hello"' in capsys.readouterr().out


def test_status_levels():
    assert _level_for(200) == logging.INFO
    assert _level_for(404) == logging.WARNING
    assert _level_for(503) == logging.ERROR

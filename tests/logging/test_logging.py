"""Test the centralized logging functionality."""

import logging
from io import StringIO

import networkx as nx

from ngflow.lib.algorithms.dinic import Dinic
from ngflow.logging import (
    disable_debug_logging,
    enable_debug_logging,
    get_logger,
    reset_logging,
    set_global_log_level,
    setup_root_logger,
)


def test_centralized_logging():
    """Test that loggers honour the package level."""
    logger = get_logger("ngflow.test")

    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.addHandler(handler)

    disable_debug_logging()
    logger.info("Test info message")
    assert "Test info message" in log_capture.getvalue()

    logger.debug("Test debug message")
    assert "Test debug message" not in log_capture.getvalue()

    enable_debug_logging()
    logger.debug("Test debug message after enable")
    assert "Test debug message after enable" in log_capture.getvalue()

    logger.removeHandler(handler)
    disable_debug_logging()


def test_logger_naming():
    logger1 = get_logger("ngflow.module1")
    logger2 = get_logger("ngflow.module2")
    assert logger1.name == "ngflow.module1"
    assert logger1 is not logger2
    assert logger1.level == logging.NOTSET


def test_set_global_log_level():
    set_global_log_level(logging.WARNING)
    root_logger = logging.getLogger("ngflow")
    assert root_logger.level == logging.WARNING
    assert all(h.level == logging.WARNING for h in root_logger.handlers)
    set_global_log_level(logging.INFO)


def test_single_root_handler():
    setup_root_logger()
    setup_root_logger()
    assert len(logging.getLogger("ngflow").handlers) == 1


def test_reset_logging_allows_custom_handler():
    stream = StringIO()
    reset_logging()
    try:
        setup_root_logger(
            level=logging.DEBUG,
            format_string="%(levelname)s|%(message)s",
            handler=logging.StreamHandler(stream),
        )
        get_logger("ngflow.custom").debug("hello")
        assert stream.getvalue() == "DEBUG|hello\n"
    finally:
        reset_logging()
        setup_root_logger()


def test_dinic_logs_phases_at_debug(caplog):
    g = nx.DiGraph()
    g.add_edge("S", "T", capacity=5)
    enable_debug_logging()
    try:
        with caplog.at_level(logging.DEBUG, logger="ngflow"):
            dinic = Dinic(g, "S", "T")
            dinic.run()
    finally:
        disable_debug_logging()

    messages = [r.getMessage() for r in caplog.records]
    assert "Phase 1 pushed 5 (total 5)" in messages
    assert "Max flow 'S' -> 'T': 5 after 1 phases" in messages

"""Restore the tokcore logger after each logging test."""

import pytest


@pytest.fixture(autouse=True)
def restore_logger(monkeypatch):
    from tokcore._logging import logger

    monkeypatch.delenv("TOKCORE_LOG_FORMAT", raising=False)
    handlers = logger.handlers[:]
    level = logger.level
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)

from __future__ import annotations

import logging

from pyrackup.core.logging import LOGGER_NAME, configure_logging, reset_logging_for_tests, set_debug_logging


def _stream_handlers(logger):
    return [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]


def test_configure_uses_bundled_default_level() -> None:
    logger = configure_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(_stream_handlers(logger)) == 1


def test_configure_is_idempotent() -> None:
    configure_logging("WARNING")
    logger = configure_logging("ERROR")
    assert len(_stream_handlers(logger)) == 1
    assert logger.level == logging.ERROR


def test_unknown_level_falls_back_to_info() -> None:
    assert configure_logging("chatty").level == logging.INFO


def test_debug_switch() -> None:
    set_debug_logging()
    logger = logging.getLogger(LOGGER_NAME)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in _stream_handlers(logger))


def test_reset_removes_handler() -> None:
    configure_logging()
    reset_logging_for_tests()
    logger = logging.getLogger(LOGGER_NAME)
    assert _stream_handlers(logger) == []
    assert logger.level == logging.NOTSET

"""Unit tests for dagwright logging module."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator

import pytest

from dagwright.core.logging import ColoredFormatter, get_logger, set_default_level

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _restore_default_level() -> Iterator[None]:
    """Save and restore the module-level _default_level after each test."""
    from dagwright.core import logging as dagwright_logging

    original = dagwright_logging._default_level
    yield
    set_default_level(original)


class TestGetLogger:
    def test_logger_is_namespaced(self) -> None:
        logger = get_logger('assembly')
        assert logger.name == 'dagwright.assembly'
        assert logger.propagate is False

    def test_handler_added_once(self) -> None:
        name = f'test_{uuid.uuid4().hex[:8]}'
        first = get_logger(name)
        second = get_logger(name)
        assert first is second
        assert len(second.handlers) == 1

    def test_new_logger_uses_default_level(self) -> None:
        set_default_level(logging.WARNING)
        logger = get_logger(f'test_{uuid.uuid4().hex[:8]}')
        assert logger.level == logging.WARNING
        for handler in logger.handlers:
            assert handler.level == logging.WARNING


class TestColoredFormatter:
    def test_format_contains_component_level_and_message(self) -> None:
        record = logging.LogRecord(
            name='dagwright.translator',
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg='translated %d node(s)',
            args=(3,),
            exc_info=None,
        )
        formatted = ColoredFormatter().format(record)
        assert '[translator]' in formatted
        assert '[INFO]' in formatted
        assert 'translated 3 node(s)' in formatted

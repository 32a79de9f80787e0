"""Tests for the logging helpers."""

import logging
import os
from io import StringIO
from unittest.mock import patch

from staccato.logging_setup import RESET, ScreenLogFormatter, get_logger, make_style, should_colorize


def test_make_style():
    assert make_style("33", "2") == ("\x1b[33;2m", RESET)
    assert make_style() == ("", RESET)


def test_should_colorize_respects_no_color():
    with patch.dict(os.environ, {"NO_COLOR": "1", "FORCE_COLOR": "1"}):
        assert should_colorize() is False


def test_should_colorize_respects_force_color():
    with patch.dict(os.environ, {"FORCE_COLOR": "1"}):
        os.environ.pop("NO_COLOR", None)
        assert should_colorize(StringIO()) is True


def test_should_colorize_not_a_tty():
    with patch.dict(os.environ, {}, clear=True):
        assert should_colorize(StringIO()) is False


def test_colored_formatter():
    record = logging.LogRecord("t", logging.ERROR, __file__, 1, "boom", None, None)
    assert ScreenLogFormatter(colored=True).format(record).startswith("\x1b[31;2m")
    plain = ScreenLogFormatter(colored=False).format(record)
    assert "boom" in plain
    assert "\x1b[" not in plain
    info = logging.LogRecord("t", logging.INFO, __file__, 1, "fine", None, None)
    assert "\x1b[" not in ScreenLogFormatter(colored=True).format(info)


def test_get_logger_does_not_duplicate_handlers():
    first = get_logger("dup-check")
    count = len(first.handlers)
    assert get_logger("dup-check") is first
    assert len(first.handlers) == count
    assert first.propagate is False

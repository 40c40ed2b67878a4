"""Tests for console log rendering."""

import logging
import sys

from src.console.widgets import render_banner, render_record


def _record(name: str, level: int, msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, msg, args, None)


def test_info_is_system_channel():
    text = render_record(_record("src.bot.autosell", logging.INFO, "💰 Selling... (%s)", "/sell all"))
    assert "[SYSTEM]" in text.plain
    assert text.plain.endswith("💰 Selling... (/sell all)")


def test_chat_channel():
    text = render_record(_record("chat", logging.INFO, "[YOU] hi"))
    assert "[CHAT] [YOU] hi" in text.plain


def test_error_channel():
    text = render_record(_record("src.bot.controller", logging.ERROR, "Kicked: %s", "banned"))
    assert "[ERROR] Kicked: banned" in text.plain


def test_chat_markup_not_interpreted():
    text = render_record(_record("chat", logging.INFO, "<Steve> [bold]hi[/bold]"))
    assert "[bold]hi[/bold]" in text.plain


def test_exception_detail_appended():
    try:
        raise RuntimeError("bad")
    except RuntimeError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "Command failed", (), sys.exc_info())
    text = render_record(record)
    assert "RuntimeError: bad" in text.plain


def test_banner():
    assert "!help" in render_banner().plain

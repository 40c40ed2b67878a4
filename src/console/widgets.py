"""
BananaMoney Lite — Console Widgets

1. ConsolePanel    — scrolling log + command prompt
2. RichLogHandler  — logging.Handler that writes records into the panel

All user-visible output goes through logging, so log lines never tear
through the prompt the way raw prints would.
"""

from __future__ import annotations

import logging
import threading
import time

from rich.text import Text
from textual.app import App
from textual.containers import Vertical
from textual.widgets import Input, RichLog

PROMPT = "🍌 > "

BANNER = r"""
  ____                                  __  __
 | __ )  __ _ _ __   __ _ _ __   __ _  |  \/  | ___  _ __   ___ _   _
 |  _ \ / _` | '_ \ / _` | '_ \ / _` | | |\/| |/ _ \| '_ \ / _ \ | | |
 | |_) | (_| | | | | (_| | | | | (_| | | |  | | (_) | | | |  __/ |_| |
 |____/ \__,_|_| |_|\__,_|_| |_|\__,_| |_|  |_|\___/|_| |_|\___|\__, |
                                                          Lite  |___/
"""

# ---- Record styling ----

# (tag, color) by channel; channel = "chat" logger or the record level
_CHANNEL_STYLES: dict[str, tuple[str, str]] = {
    "chat": ("CHAT", "green"),
    "DEBUG": ("DEBUG", "bright_black"),
    "INFO": ("SYSTEM", "cyan"),
    "WARNING": ("WARN", "yellow"),
    "ERROR": ("ERROR", "red"),
    "CRITICAL": ("ERROR", "bold red"),
}


def _fmt_time(ts: float) -> str:
    return time.strftime("%H:%M:%S", time.localtime(ts))


def render_record(record: logging.LogRecord) -> Text:
    """Build the colored console line for a log record."""
    if record.name == "chat" or record.name.startswith("chat."):
        channel = "chat"
    else:
        channel = record.levelname
    tag, color = _CHANNEL_STYLES.get(channel, ("LOG", "white"))

    text = Text()
    text.append(f"[{_fmt_time(record.created)}] ", style="bright_black")
    text.append(f"[{tag}]", style=f"bold {color}")
    text.append(" ")
    # Chat is server-controlled text, keep it out of markup parsing
    text.append(record.getMessage(), style="white" if channel == "chat" else color)
    if record.exc_info and record.levelno >= logging.ERROR:
        exc = record.exc_info[1]
        text.append(f"\n    {type(exc).__name__}: {exc}", style="red")
    return text


def render_banner() -> Text:
    text = Text(BANNER.strip("\n"), style="bold yellow")
    text.append("\n  Type !help for commands, anything else is sent to chat\n", style="bright_black")
    return text


# ---- 1. Console Panel ----

class ConsolePanel(Vertical):
    """Output log above a single-line prompt."""

    def compose(self):
        yield RichLog(highlight=False, markup=False, wrap=True, max_lines=2000, id="console-log")
        yield Input(placeholder=f"{PROMPT}message or !command", id="prompt")

    @property
    def output(self) -> RichLog:
        return self.query_one("#console-log", RichLog)

    @property
    def prompt(self) -> Input:
        return self.query_one("#prompt", Input)

    def write(self, text: Text) -> None:
        self.output.write(text)

    def clear_log(self) -> None:
        self.output.clear()


# ---- 2. Logging bridge ----

class RichLogHandler(logging.Handler):
    """Routes log records to a ConsolePanel.

    Records from other threads (bridge, workers) are posted to the app
    thread with App.call_from_thread.
    """

    def __init__(self, app: App, panel: ConsolePanel, level: int = logging.NOTSET):
        super().__init__(level)
        self._app = app
        self._panel = panel
        self._thread_id = threading.get_ident()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = render_record(record)
            if threading.get_ident() == self._thread_id:
                self._panel.write(text)
            else:
                self._app.call_from_thread(self._panel.write, text)
        except Exception:
            self.handleError(record)

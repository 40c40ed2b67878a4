"""
BananaMoney Lite Console — Textual TUI App

Line-oriented REPL for the bot:
  - output: every log record, colored by channel (SYSTEM / CHAT / ERROR)
  - input:  `!command` goes to the command dispatcher, anything else to chat

The app owns the asyncio loop. mineflayer events are posted onto it with
loop.call_soon_threadsafe, timers run on it via LoopScheduler, and chest
deposits run in a thread worker.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.timer import Timer
from textual.widgets import Footer, Input, Static

from src.bot.controller import SessionController
from src.bot.timers import LoopScheduler
from src.console.widgets import ConsolePanel, RichLogHandler, render_banner
from src.data.config import BotConfig, ConfigStore
from src.session.client import Dispatch, GameSession, MineflayerSession
from src.session.errors import install_fault_handlers

log = logging.getLogger(__name__)

SessionFactory = Callable[[BotConfig, Dispatch], GameSession]


def mineflayer_session(config: BotConfig, dispatch: Dispatch) -> GameSession:
    return MineflayerSession(config.connection, config.auto_eat, dispatch=dispatch)


class BananaConsole(App):
    """BananaMoney Lite bot console."""

    CSS_PATH = "styles.tcss"
    TITLE = "BananaMoney Lite"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
        Binding("ctrl+l", "clear_log", "Clear"),
    ]

    def __init__(
        self,
        config: BotConfig,
        store: ConfigStore,
        session_factory: SessionFactory = mineflayer_session,
        log_level: int = logging.INFO,
    ):
        super().__init__()
        self.config = config
        self.store = store
        self._session_factory = session_factory
        self._log_level = log_level
        self._log_handler: RichLogHandler | None = None
        self._refresh_timer: Timer | None = None
        self.controller: SessionController | None = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="header-bar"):
            yield Static("🍌 BananaMoney Lite", id="status-label")
            yield Static("", id="state-label")
        yield ConsolePanel()
        yield Footer()

    def on_mount(self) -> None:
        panel = self.query_one(ConsolePanel)
        panel.write(render_banner())

        self._log_handler = RichLogHandler(self, panel, level=self._log_level)
        logging.getLogger().addHandler(self._log_handler)

        loop = asyncio.get_running_loop()
        install_fault_handlers(loop)

        session = self._session_factory(self.config, loop.call_soon_threadsafe)
        self.controller = SessionController(
            self.config,
            self.store,
            session,
            LoopScheduler(loop),
            offload=self._offload,
        )

        self._refresh_timer = self.set_interval(1.0, self._update_header)
        panel.prompt.focus()
        # Starting node and connecting blocks briefly; let the first frame paint
        self.call_after_refresh(self._start_controller)

    def on_unmount(self) -> None:
        if self._log_handler is not None:
            logging.getLogger().removeHandler(self._log_handler)
            self._log_handler = None

    def _start_controller(self) -> None:
        if self.controller is not None:
            self.controller.start()
            self._update_header()

    def _offload(self, fn: Callable[[], None]) -> None:
        self.run_worker(fn, thread=True, group="session", exit_on_error=False)

    def _update_header(self) -> None:
        if self.controller is None:
            return
        status: Static = self.query_one("#status-label", Static)
        state: Static = self.query_one("#state-label", Static)
        c = self.controller.config.connection
        status.update(f"🍌 BananaMoney Lite | {c.username}@{c.host}:{c.port}")
        state.update(self.controller.status_line())

    # ---- Input ----

    def on_input_submitted(self, event: Input.Submitted) -> None:
        line = event.value
        event.input.value = ""
        if self.controller is None:
            return
        self.controller.handle_line(line)
        self._update_header()

    # ---- Actions ----

    def action_clear_log(self) -> None:
        self.query_one(ConsolePanel).clear_log()

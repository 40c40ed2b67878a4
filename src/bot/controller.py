"""
BananaMoney Lite — Session Controller

Owns the connection lifecycle and routes console input.

Architecture:
    console line → AliasResolver → "!cmd"  → CommandDispatcher
                                 → text    → session.chat()

    GameSession events
        spawn  → start auto-sell / bone collector from config
        end    → reconnect after a fixed delay (no backoff, no cap)
        kicked / error / chat / window_open → logged
"""

from __future__ import annotations

import logging

from src.bot.autosell import AutoSell
from src.bot.bones import BoneCollector, Offload
from src.bot.commands import COMMAND_PREFIX, CommandDispatcher
from src.bot.gui import GuiManager
from src.bot.timers import Scheduler
from src.data.aliases import AliasResolver
from src.data.config import BotConfig, ConfigStore
from src.session.client import GameSession
from src.session.errors import SessionError, SessionFault, report_fault

log = logging.getLogger(__name__)
chat_log = logging.getLogger("chat")


class SessionController:
    """Ties the game session, timers, and console together."""

    def __init__(
        self,
        config: BotConfig,
        store: ConfigStore,
        session: GameSession,
        scheduler: Scheduler,
        offload: Offload | None = None,
    ):
        self.config = config
        self.store = store
        self.session = session
        self.scheduler = scheduler
        self.aliases = AliasResolver(config.aliases)
        self.auto_sell = AutoSell(session, scheduler, config.auto_sell)
        self.bones = BoneCollector(session, scheduler, config.bone_collector, offload)
        self.gui = GuiManager(session)
        self.commands = CommandDispatcher(store, self.auto_sell, self.bones, self.gui)
        self.reconnects = 0
        self._started = False

    # ---- Lifecycle ----

    def start(self) -> None:
        """Hook session events and open the first connection."""
        if self._started:
            return
        self._started = True
        self.session.on("spawn", self.on_spawn)
        self.session.on("end", self.on_end)
        self.session.on("kicked", self.on_kicked)
        self.session.on("error", self.on_error)
        self.session.on("chat", self.on_chat)
        self.session.on("window_open", self.on_window_open)
        self.connect()

    def connect(self) -> None:
        c = self.config.connection
        log.info("Connecting to %s as %s...", c.host, c.username)
        try:
            self.session.connect()
        except SessionError as e:
            report_fault(e.fault, "Connect failed")
            self.on_end(str(e.fault))

    # ---- Session events ----

    def on_spawn(self) -> None:
        log.info("Bot successfully spawned! 🍌")
        log.info("Use !help for commands")
        if self.config.auto_sell.enabled:
            self.auto_sell.start()
        if self.config.bone_collector.enabled:
            self.bones.start()

    def on_end(self, reason: str = "") -> None:
        # The bot is gone; bone collection resumes on the next spawn if enabled
        self.bones.stop()
        c = self.config.connection
        suffix = f" ({reason})" if reason else ""
        if not c.auto_reconnect:
            log.error("Disconnected%s.", suffix)
            return
        delay = c.reconnect_delay_ms / 1000
        log.error("Disconnected%s. Reconnecting in %.0fs...", suffix, delay)
        self.scheduler.after(delay, self._reconnect)

    def _reconnect(self) -> None:
        self.reconnects += 1
        self.connect()

    def on_kicked(self, reason: str) -> None:
        log.error("Kicked: %s", reason)

    def on_error(self, fault: SessionFault) -> None:
        report_fault(fault, "Error")

    def on_chat(self, message: str, position: str = "") -> None:
        # Action bar text changes every tick
        if position == "game_info":
            return
        chat_log.info(message)

    def on_window_open(self, title: str) -> None:
        log.info("Window opened: %s", title)

    # ---- Console ----

    def handle_line(self, line: str) -> None:
        """Process one console line: aliases, then command or chat."""
        raw = line.strip()
        if not raw:
            return
        raw = self.aliases.resolve(raw)

        if raw.startswith(COMMAND_PREFIX):
            self.run_command(raw[len(COMMAND_PREFIX):])
        else:
            self.send_chat(raw)

    def run_command(self, text: str) -> None:
        try:
            new_config = self.commands.dispatch(text, self.config)
        except SessionError as e:
            report_fault(e.fault, "Command failed")
            return
        except Exception:
            log.exception("Command failed: %s", text)
            return
        self.config = new_config

    def send_chat(self, text: str) -> None:
        if not self.session.connected:
            log.error("Bot not connected.")
            return
        try:
            self.session.chat(text)
        except SessionError as e:
            report_fault(e.fault, "Chat failed")
            return
        chat_log.info("[YOU] %s", text)

    def status_line(self) -> str:
        parts = [
            "IN GAME" if self.session.connected else "OFFLINE",
            self.auto_sell.status_line(),
            self.bones.status_line(),
        ]
        if self.reconnects:
            parts.append(f"reconnects={self.reconnects}")
        return " | ".join(parts)

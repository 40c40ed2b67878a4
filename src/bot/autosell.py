"""
BananaMoney Lite — Auto-Sell

Sends the configured sell command to chat on a fixed period.

    stopped --start()--> running   (sells immediately, then every interval)
    running --stop()---> stopped
"""

from __future__ import annotations

import logging

from src.bot.timers import Scheduler, TimerHandle
from src.data.config import AutoSellConfig
from src.session.client import GameSession
from src.session.errors import SessionError, report_fault

log = logging.getLogger(__name__)


class AutoSell:
    """Periodic sell command. At most one timer is scheduled at a time."""

    def __init__(
        self,
        session: GameSession,
        scheduler: Scheduler,
        config: AutoSellConfig | None = None,
    ):
        config = config or AutoSellConfig()
        self.session = session
        self.scheduler = scheduler
        self.command: str = config.command
        self.interval_ms: int = config.interval_ms
        self._handle: TimerHandle | None = None
        self.sells = 0

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def handle(self) -> TimerHandle | None:
        return self._handle if self.running else None

    def start(self) -> TimerHandle:
        """Start selling. Returns the live handle; a second call is a no-op."""
        if self._handle is not None and self._handle.active:
            return self._handle

        log.info("💰 Auto-Sell: STARTED (%.0fs interval)", self.interval_ms / 1000)
        self.sell()
        self._handle = self.scheduler.every(self.interval_ms / 1000, self.sell)
        return self._handle

    def stop(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        log.info("💰 Auto-Sell: STOPPED")

    def set_interval(self, ms: int) -> None:
        """Change the period. A running timer restarts (and sells) right away."""
        self.interval_ms = ms
        if self.running:
            self.stop()
            self.start()
        log.info("💰 Interval set to %.0fs", ms / 1000)

    def set_command(self, command: str) -> None:
        self.command = command
        log.info("💰 Command set to: %s", command)

    def sell(self) -> None:
        """Send the sell command once. Skipped while not in game."""
        if not self.session.connected:
            log.debug("sell skipped, not connected")
            return
        log.info("💰 Selling... (%s)", self.command)
        try:
            self.session.chat(self.command)
        except SessionError as e:
            report_fault(e.fault, "Sell failed")
            return
        self.sells += 1

    def status_line(self) -> str:
        if not self.running:
            return "sell=off"
        return f"sell={self.interval_ms / 1000:.0f}s"

"""
BananaMoney Lite — Window Manager

Console access to whatever window the server has open (shop menus,
chests): list its slots, click, shift-click, close.
"""

from __future__ import annotations

import logging

from src.session.client import GameSession
from src.session.errors import SessionError, report_fault

log = logging.getLogger(__name__)


class GuiManager:
    def __init__(self, session: GameSession):
        self.session = session

    def show_window(self) -> None:
        """Log the open window and its non-empty slots."""
        if not self._ready():
            return
        try:
            window = self.session.current_window()
        except SessionError as e:
            report_fault(e.fault, "Read window failed")
            return
        if window is None:
            log.info("No window open")
            return

        log.info("=== %s (id %d, %d items) ===", window.label, window.window_id, len(window.slots))
        for item in window.slots:
            marker = " (inv)" if window.inventory_start and item.slot >= window.inventory_start else ""
            log.info("[%d] %s x%d%s", item.slot, item.display_name or item.name, item.count, marker)

    def click_slot(self, slot: int) -> None:
        self._click(slot, shift=False)

    def shift_click(self, slot: int) -> None:
        self._click(slot, shift=True)

    def close_window(self) -> None:
        if not self._ready():
            return
        try:
            closed = self.session.close_window()
        except SessionError as e:
            report_fault(e.fault, "Close window failed")
            return
        if closed:
            log.info("Window closed")
        else:
            log.info("No window open")

    def _click(self, slot: int, shift: bool) -> None:
        if not self._ready():
            return
        action = "Shift-clicked" if shift else "Clicked"
        try:
            if self.session.current_window() is None:
                log.error("No window open")
                return
            self.session.click_slot(slot, shift=shift)
        except SessionError as e:
            report_fault(e.fault, f"Click slot {slot} failed")
            return
        log.info("%s slot %d", action, slot)

    def _ready(self) -> bool:
        if not self.session.connected:
            log.error("Bot not connected.")
            return False
        return True

"""
BananaMoney Lite — Loop Timers

One-shot and periodic callbacks on the asyncio event loop. Every
scheduling call returns a TimerHandle; cancelling the handle is the only
way to stop a periodic task.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

log = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle:
    """Cancel token for a scheduled callback."""

    def __init__(self, interval: float, repeat: bool):
        self.interval = interval
        self.repeat = repeat
        self._active = True
        self._pending: asyncio.TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Stop the timer. Safe to call more than once."""
        self._active = False
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def __repr__(self) -> str:
        kind = "every" if self.repeat else "after"
        state = "active" if self._active else "cancelled"
        return f"<TimerHandle {kind} {self.interval:.1f}s {state}>"


class Scheduler(Protocol):
    def every(self, interval: float, callback: Callback) -> TimerHandle: ...
    def after(self, delay: float, callback: Callback) -> TimerHandle: ...


class LoopScheduler:
    """Scheduler backed by loop.call_later()."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def every(self, interval: float, callback: Callback) -> TimerHandle:
        """Run callback every `interval` seconds, first run after one interval."""
        handle = TimerHandle(interval, repeat=True)
        self._arm(handle, callback)
        return handle

    def after(self, delay: float, callback: Callback) -> TimerHandle:
        """Run callback once after `delay` seconds."""
        handle = TimerHandle(delay, repeat=False)
        self._arm(handle, callback)
        return handle

    def _arm(self, handle: TimerHandle, callback: Callback) -> None:
        handle._pending = self.loop.call_later(
            handle.interval, self._fire, handle, callback,
        )

    def _fire(self, handle: TimerHandle, callback: Callback) -> None:
        handle._pending = None
        if not handle.active:
            return
        # Re-arm first so a slow or failing callback keeps the period
        if handle.repeat:
            self._arm(handle, callback)
        else:
            handle._active = False
        try:
            callback()
        except Exception:
            log.exception("timer callback failed (%r)", handle)

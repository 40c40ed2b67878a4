"""Shared fixtures for BananaMoney Lite tests."""

from __future__ import annotations

import logging

import pytest

from src.bot.timers import TimerHandle
from src.data.config import BotConfig, ConfigStore, Vec3
from src.session.client import DroppedItem, SlotItem, WindowView
from src.session.errors import FaultKind, SessionError, SessionFault


class ManualScheduler:
    """Scheduler driven by advance() instead of a real clock."""

    def __init__(self):
        self.now = 0.0
        self._timers: list[tuple[TimerHandle, float, object]] = []

    def every(self, interval, callback):
        handle = TimerHandle(interval, repeat=True)
        self._timers.append((handle, self.now + interval, callback))
        return handle

    def after(self, delay, callback):
        handle = TimerHandle(delay, repeat=False)
        self._timers.append((handle, self.now + delay, callback))
        return handle

    @property
    def active(self) -> list[TimerHandle]:
        return [h for h, _, _ in self._timers if h.active]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self.now + seconds
        while True:
            due = [
                (when, i) for i, (h, when, _) in enumerate(self._timers)
                if h.active and when <= target
            ]
            if not due:
                break
            when, i = min(due)
            handle, _, callback = self._timers[i]
            self.now = when
            if handle.repeat:
                self._timers[i] = (handle, when + handle.interval, callback)
            else:
                handle._active = False
            callback()
        self.now = target


class FakeSession:
    """In-memory GameSession."""

    def __init__(self, connected: bool = True):
        self._connected = connected
        self.handlers: dict[str, list] = {}
        self.sent: list[str] = []
        self.clicks: list[tuple[int, bool]] = []
        self.window: WindowView | None = None
        self.closed = 0
        self.drops: list[DroppedItem] = []
        self.moves: list[tuple[Vec3, float]] = []
        self.stopped = 0
        self.full = False
        self.deposits: list[tuple[Vec3, str]] = []
        self.deposit_count = 64
        self.connects = 0
        self.fail_with: SessionFault | None = None

    @property
    def connected(self) -> bool:
        return self._connected

    def on(self, event, callback):
        self.handlers.setdefault(event, []).append(callback)

    def emit(self, event, *args):
        if event == "spawn":
            self._connected = True
        elif event == "end":
            self._connected = False
        for cb in self.handlers.get(event, []):
            cb(*args)

    def connect(self):
        self.connects += 1

    def _check(self):
        if self.fail_with is not None:
            raise SessionError(self.fail_with)

    def chat(self, message):
        self._check()
        self.sent.append(message)

    def current_window(self):
        self._check()
        return self.window

    def click_slot(self, slot, shift=False):
        self._check()
        self.clicks.append((slot, shift))

    def close_window(self):
        self._check()
        if self.window is None:
            return False
        self.window = None
        self.closed += 1
        return True

    def dropped_items(self, center, radius):
        self._check()
        return [d for d in self.drops if d.distance_to(center) <= radius]

    def move_near(self, pos, reach=1.0):
        self._check()
        self.moves.append((pos, reach))

    def stop_moving(self):
        self.stopped += 1

    def inventory_full(self):
        self._check()
        return self.full

    def deposit(self, chest, item):
        self._check()
        self.deposits.append((chest, item))
        self.full = False
        return self.deposit_count


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def offline_session() -> FakeSession:
    return FakeSession(connected=False)


@pytest.fixture
def store(tmp_path) -> ConfigStore:
    return ConfigStore(tmp_path / "config.json")


@pytest.fixture
def config() -> BotConfig:
    return BotConfig()


@pytest.fixture
def chest_window() -> WindowView:
    return WindowView(
        window_id=3,
        title="Shop",
        window_type="minecraft:generic_9x3",
        slots=[
            SlotItem(slot=0, name="diamond", count=2, display_name="Diamond"),
            SlotItem(slot=13, name="bone", count=64, display_name="Bone"),
            SlotItem(slot=30, name="bread", count=5, display_name="Bread"),
        ],
        inventory_start=27,
    )


@pytest.fixture
def ignorable_fault() -> SessionFault:
    return SessionFault(
        FaultKind.IGNORABLE, "TypeError",
        "Cannot read properties of undefined (reading 'passengers')",
    )


@pytest.fixture
def logged(caplog):
    """Log messages captured so far, optionally at one level."""
    def _logged(level: int | None = None) -> list[str]:
        return [
            r.getMessage()
            for r in caplog.get_records("setup") + caplog.records
            if level is None or r.levelno == level
        ]
    return _logged


@pytest.fixture(autouse=True)
def _capture_info(caplog):
    caplog.set_level(logging.DEBUG)

"""
BananaMoney Lite — Game Session Adapter

Wraps a mineflayer bot (driven through the `javascript` bridge) behind a
small Python interface. Nothing outside this module touches JS objects.

Event flow:
    mineflayer (node) → bridge thread → dispatch() → event loop → callbacks

Events:
    "spawn"        ()
    "end"          (reason: str)
    "kicked"       (reason: str)           decoded to plain text
    "error"        (fault: SessionFault)
    "chat"         (message: str, position: str)
    "window_open"  (title: str)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from src.data.config import AutoEatConfig, ConnectionConfig, Vec3
from src.session.chat import chat_text
from src.session.errors import (
    SessionError,
    SessionFault,
    FaultKind,
    classify_error,
    describe_kick_reason,
)

log = logging.getLogger(__name__)

EVENTS = ("spawn", "end", "kicked", "error", "chat", "window_open")

EventCallback = Callable[..., None]
# Runs fn(*args) on the event loop thread
Dispatch = Callable[..., None]


# ---- Views handed to the rest of the bot ----

@dataclass(frozen=True)
class SlotItem:
    slot: int
    name: str
    count: int
    display_name: str = ""


@dataclass(frozen=True)
class WindowView:
    """Snapshot of the open window."""
    window_id: int
    title: str
    window_type: str
    slots: list[SlotItem]
    # First slot index belonging to the player inventory
    inventory_start: int = 0

    @property
    def label(self) -> str:
        return self.title or self.window_type


@dataclass(frozen=True)
class DroppedItem:
    entity_id: int
    name: str
    count: int
    x: float
    y: float
    z: float

    def distance_to(self, pos: Vec3) -> float:
        # Measured from the block centre
        dx = self.x - (pos.x + 0.5)
        dy = self.y - pos.y
        dz = self.z - (pos.z + 0.5)
        return (dx * dx + dy * dy + dz * dz) ** 0.5


class GameSession(Protocol):
    """What the bot modules need from the game connection."""

    @property
    def connected(self) -> bool: ...
    def on(self, event: str, callback: EventCallback) -> None: ...
    def connect(self) -> None: ...
    def chat(self, message: str) -> None: ...
    def current_window(self) -> WindowView | None: ...
    def click_slot(self, slot: int, shift: bool = False) -> None: ...
    def close_window(self) -> bool: ...
    def dropped_items(self, center: Vec3, radius: float) -> list[DroppedItem]: ...
    def move_near(self, pos: Vec3, reach: float = 1.0) -> None: ...
    def stop_moving(self) -> None: ...
    def inventory_full(self) -> bool: ...
    def deposit(self, chest: Vec3, item: str) -> int: ...


# ---- JS bridge ----

_js: dict[str, Any] = {}


def _bridge() -> dict[str, Any]:
    """Import the bridge and node modules once. Starts the node process."""
    if _js:
        return _js

    from javascript import require, On, globalThis

    _js["On"] = On
    _js["globalThis"] = globalThis
    _js["mineflayer"] = require("mineflayer")
    _js["pathfinder"] = require("mineflayer-pathfinder")
    _js["vec3"] = require("vec3")
    try:
        _js["autoEat"] = require("mineflayer-auto-eat")
    except Exception as e:
        log.warning("mineflayer-auto-eat not available (%s), auto-eat disabled", e)
        _js["autoEat"] = None

    # Keep node alive on errors thrown outside any listener
    @On(globalThis.process, "uncaughtException")
    def _node_uncaught(this, err, *args):
        fault = classify_error(err)
        if fault.ignorable:
            log.warning("Mineflayer bug caught (ignored): %s", fault.message)
        else:
            log.error("Uncaught exception in node: %s", fault)

    return _js


def _auto_eat_plugin(module: Any) -> Any:
    # Export name changed between plugin versions
    for attr in ("plugin", "loader", "default"):
        try:
            plugin = getattr(module, attr)
        except Exception:
            plugin = None
        if plugin:
            return plugin
    return module


class MineflayerSession:
    """GameSession backed by a mineflayer bot.

    A new JS bot is created on every connect(); handlers registered with
    on() survive reconnects.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        auto_eat: AutoEatConfig | None = None,
        dispatch: Dispatch | None = None,
    ):
        self.config = config
        self.auto_eat = auto_eat or AutoEatConfig()
        self._dispatch: Dispatch = dispatch or (lambda fn, *args: fn(*args))
        self._handlers: dict[str, list[EventCallback]] = {e: [] for e in EVENTS}
        self._bot: Any = None
        self._spawned = False
        self.connects = 0

    # ---- Events ----

    def on(self, event: str, callback: EventCallback) -> None:
        """Register a callback for a session event (runs on the loop thread)."""
        if event not in self._handlers:
            raise ValueError(f"unknown session event: {event}")
        self._handlers[event].append(callback)

    def _emit(self, event: str, *args: Any) -> None:
        for cb in self._handlers[event]:
            try:
                cb(*args)
            except Exception:
                log.exception("%s handler failed", event)

    def _post(self, event: str, *args: Any) -> None:
        """Hand an event over to the loop thread."""
        self._dispatch(self._emit, event, *args)

    # ---- Lifecycle ----

    @property
    def connected(self) -> bool:
        return self._bot is not None and self._spawned

    def connect(self) -> None:
        js = _bridge()
        c = self.config
        options: dict[str, Any] = {
            "host": c.host,
            "port": c.port,
            "username": c.username,
            "auth": c.auth,
            "hideErrors": True,
            "physicsEnabled": True,
        }
        if c.version:
            options["version"] = c.version

        self._spawned = False
        try:
            bot = js["mineflayer"].createBot(options)
        except Exception as e:
            raise SessionError(classify_error(e)) from e

        bot.loadPlugin(js["pathfinder"].pathfinder)
        if self.auto_eat.enabled and js["autoEat"] is not None:
            bot.loadPlugin(_auto_eat_plugin(js["autoEat"]))

        self._bot = bot
        self.connects += 1
        self._wire(bot)

    def _wire(self, bot: Any) -> None:
        """Attach JS listeners. Events from a replaced bot are dropped."""
        On = _js["On"]
        JSON = _js["globalThis"].JSON

        def current() -> bool:
            return bot is self._bot

        @On(bot._client, "error")
        def _client_error(this, err, *args):
            if current():
                self._post("error", classify_error(err))

        @On(bot, "error")
        def _error(this, err, *args):
            if current():
                self._post("error", classify_error(err))

        @On(bot, "spawn")
        def _spawn(this, *args):
            if not current():
                return
            first = not self._spawned
            self._spawned = True
            if first:
                self._setup_plugins(bot)
            self._post("spawn")

        @On(bot, "end")
        def _end(this, reason=None, *args):
            if not current():
                return
            self._spawned = False
            self._post("end", str(reason or ""))

        @On(bot, "kicked")
        def _kicked(this, reason=None, *args):
            if not current():
                return
            if reason is not None and not isinstance(reason, str):
                reason = JSON.stringify(reason)
            self._post("kicked", describe_kick_reason(reason))

        @On(bot, "messagestr")
        def _message(this, message, position=None, *args):
            if current():
                self._post("chat", str(message), str(position or ""))

        @On(bot, "windowOpen")
        def _window_open(this, window, *args):
            if current():
                self._post("window_open", _plain_title(window.title) or str(window.type or "?"))

    def _setup_plugins(self, bot: Any) -> None:
        pf = _js["pathfinder"]
        try:
            bot.pathfinder.setMovements(pf.Movements(bot))
        except Exception as e:
            log.warning("pathfinder movements not set: %s", classify_error(e))

        if self.auto_eat.enabled and bot.autoEat:
            bot.autoEat.options = {
                "priority": "foodPoints",
                "startAt": self.auto_eat.start_at,
                "bannedFood": [],
            }
            log.info("🍖 Auto-Eat: ACTIVE (below %d food)", self.auto_eat.start_at)

    # ---- Actions ----

    def _require_bot(self) -> Any:
        if not self.connected:
            raise SessionError(
                SessionFault(FaultKind.PROTOCOL, "", "Bot not connected.")
            )
        return self._bot

    def _call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Call into JS, turning bridge errors into SessionError."""
        try:
            return fn(*args, **kwargs)
        except SessionError:
            raise
        except Exception as e:
            raise SessionError(classify_error(e)) from e

    def chat(self, message: str) -> None:
        bot = self._require_bot()
        self._call(bot.chat, message)

    def current_window(self) -> WindowView | None:
        bot = self._require_bot()
        window = bot.currentWindow
        if not window:
            return None

        def read() -> WindowView:
            slots = [
                SlotItem(
                    slot=int(item.slot),
                    name=str(item.name),
                    count=int(item.count),
                    display_name=str(item.displayName or ""),
                )
                for item in window.slots
                if item
            ]
            return WindowView(
                window_id=int(window.id),
                title=_plain_title(window.title),
                window_type=str(window.type or ""),
                slots=slots,
                inventory_start=int(window.inventoryStart or 0),
            )

        return self._call(read)

    def click_slot(self, slot: int, shift: bool = False) -> None:
        bot = self._require_bot()
        # mode 0 = click, mode 1 = shift-click; left mouse button
        self._call(bot.clickWindow, slot, 0, 1 if shift else 0)

    def close_window(self) -> bool:
        bot = self._require_bot()
        window = bot.currentWindow
        if not window:
            return False
        self._call(bot.closeWindow, window)
        return True

    def dropped_items(self, center: Vec3, radius: float) -> list[DroppedItem]:
        bot = self._require_bot()
        Object = _js["globalThis"].Object

        def scan() -> list[DroppedItem]:
            found = []
            for ent in Object.values(bot.entities):
                if not ent or str(ent.name or "").lower() != "item":
                    continue
                item = ent.getDroppedItem()
                pos = ent.position
                drop = DroppedItem(
                    entity_id=int(ent.id),
                    name=str(item.name) if item else "unknown",
                    count=int(item.count) if item else 0,
                    x=float(pos.x), y=float(pos.y), z=float(pos.z),
                )
                if drop.distance_to(center) <= radius:
                    found.append(drop)
            return found

        return self._call(scan)

    def move_near(self, pos: Vec3, reach: float = 1.0) -> None:
        bot = self._require_bot()
        goal = _js["pathfinder"].goals.GoalNear(pos.x, pos.y, pos.z, reach)
        self._call(bot.pathfinder.setGoal, goal)

    def stop_moving(self) -> None:
        if self.connected:
            self._call(self._bot.pathfinder.setGoal, None)

    def inventory_full(self) -> bool:
        bot = self._require_bot()
        return self._call(bot.inventory.emptySlotCount) == 0

    def deposit(self, chest: Vec3, item: str) -> int:
        """Walk to the chest and put every `item` stack in it. Blocks.

        Returns the number of items moved.
        """
        bot = self._require_bot()
        js = _js

        def run() -> int:
            target = js["vec3"](chest.x, chest.y, chest.z)
            block = bot.blockAt(target)
            if not block:
                raise SessionError(SessionFault(
                    FaultKind.PROTOCOL, "", f"No block loaded at {chest}",
                ))
            bot.pathfinder.goto(
                js["pathfinder"].goals.GoalNear(chest.x, chest.y, chest.z, 2),
                timeout=60,
            )
            info = bot.registry.itemsByName[item]
            if not info:
                raise SessionError(SessionFault(
                    FaultKind.UNEXPECTED, "", f"Unknown item: {item}",
                ))
            count = int(bot.inventory.count(info.id, None))
            container = bot.openContainer(block, timeout=30)
            try:
                if count:
                    container.deposit(info.id, None, count, timeout=30)
            finally:
                container.close()
            return count

        return self._call(run)


def _plain_title(title: Any) -> str:
    """Window titles arrive as JSON chat components on newer servers."""
    if title is None:
        return ""
    text = str(title)
    if text.startswith("{") or text.startswith('"'):
        return chat_text(text)
    return text

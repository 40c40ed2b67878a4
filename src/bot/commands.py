"""
BananaMoney Lite — Console Commands

Flat dispatch over the fixed command vocabulary. Each command takes the
current BotConfig and returns the config to keep; commands that change it
save it through the ConfigStore before returning.

    !help
    !sell on|off|interval <seconds>|cmd <text>
    !bones on|off
    !gui | !window
    !click <slot>   !shift <slot>   !close
    !spawner <x> <y> <z>
    !chest <x> <y> <z>
"""

from __future__ import annotations

import logging
from typing import Callable

from src.bot.autosell import AutoSell
from src.bot.bones import BoneCollector
from src.bot.gui import GuiManager
from src.data.config import BotConfig, ConfigStore, Vec3

log = logging.getLogger(__name__)

COMMAND_PREFIX = "!"

HELP_LINES = [
    ("!bones on/off", "Toggle bone collector"),
    ("!gui", "Show current window"),
    ("!click <slot>", "Click window slot"),
    ("!shift <slot>", "Shift-click slot"),
    ("!close", "Close window"),
    ("!spawner x y z", "Set spawner position"),
    ("!chest x y z", "Set chest position"),
    ("!sell on/off", "Toggle auto-sell"),
    ("!sell interval <s>", "Set sell delay (seconds)"),
    ("!sell cmd <cmd>", "Set sell command"),
    ("(No prefix)", "Send chat message"),
]

Handler = Callable[[list[str], str, BotConfig], BotConfig]


def parse_int(text: str) -> int | None:
    """Strict base-10 integer, or None."""
    try:
        return int(text, 10)
    except (TypeError, ValueError):
        return None


class CommandDispatcher:
    """Routes `!`-prefixed console input to its handler."""

    def __init__(
        self,
        store: ConfigStore,
        auto_sell: AutoSell,
        bones: BoneCollector,
        gui: GuiManager,
    ):
        self.store = store
        self.auto_sell = auto_sell
        self.bones = bones
        self.gui = gui
        self._handlers: dict[str, Handler] = {
            "help": self._help,
            "sell": self._sell,
            "bones": self._bones,
            "gui": self._gui,
            "window": self._gui,
            "click": self._click,
            "shift": self._shift,
            "close": self._close,
            "spawner": self._spawner,
            "chest": self._chest,
        }

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, text: str, config: BotConfig) -> BotConfig:
        """Run one command line (without the prefix). Returns the new config."""
        raw_args = text.split()
        if not raw_args:
            log.error("Unknown command: . Type !help")
            return config
        args = [a.lower() for a in raw_args]
        cmd = args[0]

        handler = self._handlers.get(cmd)
        if handler is None:
            log.error("Unknown command: %s. Type !help", cmd)
            return config
        return handler(args, text, config)

    # ---- Persistence ----

    def _commit(self, config: BotConfig, message: str = "") -> BotConfig:
        """Save config; log `message` only when the save worked."""
        result = self.store.save(config)
        if result.ok:
            if message:
                log.info(message)
        else:
            log.error("Failed to save config: %s", result.error)
        return config

    # ---- Handlers ----

    def _help(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        log.info("=== Commands ===")
        width = max(len(usage) for usage, _ in HELP_LINES)
        for usage, desc in HELP_LINES:
            log.info("%s - %s", usage.ljust(width), desc)
        if config.aliases:
            log.info("=== Aliases ===")
            for key, value in sorted(config.aliases.items()):
                log.info("%s -> %s", key, value)
        return config

    def _sell(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        usage = "Usage: !sell <on|off|interval|cmd>"
        if len(args) < 2:
            log.error(usage)
            return config

        sub = args[1]
        if sub == "on":
            self.auto_sell.start()
            return self._commit(config.with_auto_sell(enabled=True))

        if sub == "off":
            self.auto_sell.stop()
            return self._commit(config.with_auto_sell(enabled=False))

        if sub == "interval":
            seconds = parse_int(args[2]) if len(args) > 2 else None
            if seconds is None or seconds <= 0:
                log.error("Invalid interval. Usage: !sell interval <seconds>")
                return config
            ms = seconds * 1000
            self.auto_sell.set_interval(ms)
            return self._commit(config.with_auto_sell(interval_ms=ms))

        if sub == "cmd":
            # Keep the original case and spacing of the command text
            parts = text.strip().split(None, 2)
            new_cmd = parts[2].strip() if len(parts) > 2 else ""
            if not new_cmd:
                log.error("Usage: !sell cmd <command>")
                return config
            self.auto_sell.set_command(new_cmd)
            return self._commit(config.with_auto_sell(command=new_cmd))

        log.error(usage)
        return config

    def _bones(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        sub = args[1] if len(args) > 1 else ""
        if sub == "on":
            self.bones.start()
        elif sub == "off":
            self.bones.stop()
        else:
            log.error("Usage: !bones on/off")
        return config

    def _gui(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        self.gui.show_window()
        return config

    def _click(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        slot = self._slot_arg(args, "Usage: !click <slot>")
        if slot is not None:
            self.gui.click_slot(slot)
        return config

    def _shift(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        slot = self._slot_arg(args, "Usage: !shift <slot>")
        if slot is not None:
            self.gui.shift_click(slot)
        return config

    def _close(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        self.gui.close_window()
        return config

    def _spawner(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        pos = self._position_arg(args, "spawner")
        if pos is None:
            return config
        self.bones.update_positions(spawner=pos)
        return self._commit(
            config.with_bone_collector(spawner_pos=pos),
            f"Spawner position updated to {pos}",
        )

    def _chest(self, args: list[str], text: str, config: BotConfig) -> BotConfig:
        pos = self._position_arg(args, "chest")
        if pos is None:
            return config
        self.bones.update_positions(chest=pos)
        return self._commit(
            config.with_bone_collector(chest_pos=pos),
            f"Chest position updated to {pos}",
        )

    # ---- Argument parsing ----

    def _slot_arg(self, args: list[str], usage: str) -> int | None:
        slot = parse_int(args[1]) if len(args) > 1 else None
        if slot is None or slot < 0:
            log.error(usage)
            return None
        return slot

    def _position_arg(self, args: list[str], name: str) -> Vec3 | None:
        if len(args) != 4:
            log.error("Usage: !%s <x> <y> <z>", name)
            return None
        coords = [parse_int(a) for a in args[1:]]
        if any(c is None for c in coords):
            log.error("Invalid coordinates. Usage: !%s <x> <y> <z>", name)
            return None
        x, y, z = coords
        return Vec3(x, y, z)

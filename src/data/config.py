"""
BananaMoney Lite — Bot Configuration

Typed configuration value loaded once from a JSON file and replaced
(never mutated in place) by console commands.

File format (camelCase keys, see config.example.json):
    host, port, username, auth, version, autoReconnect, reconnectDelay,
    autoSell{enabled, command, interval}, boneCollector{...},
    autoEat{enabled, startAt}, aliases{token: replacement}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.json")


class ConfigError(Exception):
    """Raised when the config file exists but cannot be parsed."""


# ---- Data classes ----

@dataclass(frozen=True)
class Vec3:
    """Integer block position."""
    x: int
    y: int
    z: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: dict | None) -> Vec3 | None:
        if not data:
            return None
        return cls(int(data["x"]), int(data["y"]), int(data["z"]))

    def __str__(self) -> str:
        return f"{self.x}, {self.y}, {self.z}"


@dataclass(frozen=True)
class ConnectionConfig:
    host: str = "localhost"
    port: int = 25565
    username: str = "BananaBot"
    auth: str = "offline"         # "offline" or "microsoft"
    version: str | None = None    # None = let mineflayer auto-detect
    auto_reconnect: bool = True
    reconnect_delay_ms: int = 5000


@dataclass(frozen=True)
class AutoSellConfig:
    enabled: bool = False
    command: str = "/sell all"
    interval_ms: int = 300_000


@dataclass(frozen=True)
class BoneCollectorConfig:
    enabled: bool = False
    spawner_pos: Vec3 | None = None
    chest_pos: Vec3 | None = None
    # Pickup radius around the spawner (blocks)
    radius: float = 8.0
    # Item collected and deposited into the chest
    item: str = "bone"
    scan_interval_ms: int = 1000


@dataclass(frozen=True)
class AutoEatConfig:
    enabled: bool = True
    # Eat when food points drop below this
    start_at: int = 14


@dataclass(frozen=True)
class BotConfig:
    """Whole bot configuration. Use dataclasses.replace() to derive a new one."""
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    auto_sell: AutoSellConfig = field(default_factory=AutoSellConfig)
    bone_collector: BoneCollectorConfig = field(default_factory=BoneCollectorConfig)
    auto_eat: AutoEatConfig = field(default_factory=AutoEatConfig)
    aliases: dict[str, str] = field(default_factory=dict)

    # ---- Derivation helpers ----

    def with_auto_sell(self, **changes) -> BotConfig:
        return replace(self, auto_sell=replace(self.auto_sell, **changes))

    def with_bone_collector(self, **changes) -> BotConfig:
        return replace(self, bone_collector=replace(self.bone_collector, **changes))

    # ---- Serialization ----

    def to_dict(self) -> dict:
        c = self.connection
        bc = self.bone_collector
        return {
            "host": c.host,
            "port": c.port,
            "username": c.username,
            "auth": c.auth,
            "version": c.version,
            "autoReconnect": c.auto_reconnect,
            "reconnectDelay": c.reconnect_delay_ms,
            "autoSell": {
                "enabled": self.auto_sell.enabled,
                "command": self.auto_sell.command,
                "interval": self.auto_sell.interval_ms,
            },
            "boneCollector": {
                "enabled": bc.enabled,
                "spawnerPos": bc.spawner_pos.to_dict() if bc.spawner_pos else None,
                "chestPos": bc.chest_pos.to_dict() if bc.chest_pos else None,
                "radius": bc.radius,
                "item": bc.item,
                "scanInterval": bc.scan_interval_ms,
            },
            "autoEat": {
                "enabled": self.auto_eat.enabled,
                "startAt": self.auto_eat.start_at,
            },
            "aliases": dict(self.aliases),
        }

    @classmethod
    def from_dict(cls, data: dict) -> BotConfig:
        """Build a config from the JSON form. Missing keys take defaults."""
        conn_d = ConnectionConfig()
        sell_d = AutoSellConfig()
        bones_d = BoneCollectorConfig()
        eat_d = AutoEatConfig()

        sell = data.get("autoSell") or {}
        bones = data.get("boneCollector") or {}
        eat = data.get("autoEat") or {}

        return cls(
            connection=ConnectionConfig(
                host=data.get("host", conn_d.host),
                port=int(data.get("port", conn_d.port)),
                username=data.get("username", conn_d.username),
                auth=data.get("auth", conn_d.auth),
                version=data.get("version", conn_d.version),
                auto_reconnect=bool(data.get("autoReconnect", conn_d.auto_reconnect)),
                reconnect_delay_ms=int(data.get("reconnectDelay", conn_d.reconnect_delay_ms)),
            ),
            auto_sell=AutoSellConfig(
                enabled=bool(sell.get("enabled", sell_d.enabled)),
                command=sell.get("command") or sell_d.command,
                interval_ms=int(sell.get("interval") or sell_d.interval_ms),
            ),
            bone_collector=BoneCollectorConfig(
                enabled=bool(bones.get("enabled", bones_d.enabled)),
                spawner_pos=Vec3.from_dict(bones.get("spawnerPos")),
                chest_pos=Vec3.from_dict(bones.get("chestPos")),
                radius=float(bones.get("radius", bones_d.radius)),
                item=bones.get("item", bones_d.item),
                scan_interval_ms=int(bones.get("scanInterval", bones_d.scan_interval_ms)),
            ),
            auto_eat=AutoEatConfig(
                enabled=bool(eat.get("enabled", eat_d.enabled)),
                start_at=int(eat.get("startAt", eat_d.start_at)),
            ),
            aliases={str(k): str(v) for k, v in (data.get("aliases") or {}).items()},
        )


# ---- Persistence ----

@dataclass(frozen=True)
class SaveResult:
    """Outcome of a save. `error` holds the reason when ok is False."""
    ok: bool
    path: Path
    error: str = ""


class ConfigStore:
    """Loads and saves BotConfig as JSON at a fixed path."""

    def __init__(self, path: str | Path = DEFAULT_CONFIG_PATH):
        self.path = Path(path)

    def load(self) -> BotConfig:
        """Read the config file. Writes defaults out if it does not exist."""
        if not self.path.exists():
            config = BotConfig()
            result = self.save(config)
            if result.ok:
                log.info("No config found, wrote defaults to %s", self.path)
            return config

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"{self.path}: invalid JSON ({e})") from e
        except OSError as e:
            raise ConfigError(f"{self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{self.path}: expected a JSON object")

        try:
            return BotConfig.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"{self.path}: {e}") from e

    def save(self, config: BotConfig) -> SaveResult:
        """Overwrite the config file. Failures are returned, not raised."""
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(config.to_dict(), indent=2) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.debug("save failed: %s", e)
            return SaveResult(ok=False, path=self.path, error=str(e))
        return SaveResult(ok=True, path=self.path)

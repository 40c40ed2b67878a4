"""
BananaMoney Lite — Bone Collector

Picks up drops around a mob spawner and stores them in a chest.

Each tick:
    inventory full + chest set  → walk to chest, deposit (off the loop)
    drops within radius         → walk to the nearest one
    otherwise                   → walk back to the spawner
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable

from src.bot.timers import Scheduler, TimerHandle
from src.data.config import BoneCollectorConfig, Vec3
from src.session.client import DroppedItem, GameSession
from src.session.errors import SessionError, report_fault

log = logging.getLogger(__name__)

# Runs a blocking function away from the event loop
Offload = Callable[[Callable[[], None]], None]


@dataclass
class CollectorStats:
    ticks: int = 0
    moves: int = 0
    deposits: int = 0
    items_deposited: int = 0


class BoneCollector:
    """Periodic drop collection around the configured spawner."""

    def __init__(
        self,
        session: GameSession,
        scheduler: Scheduler,
        config: BoneCollectorConfig | None = None,
        offload: Offload | None = None,
    ):
        self.session = session
        self.scheduler = scheduler
        self.config = config or BoneCollectorConfig()
        self._offload: Offload = offload or (lambda fn: fn())
        self._handle: TimerHandle | None = None
        self._depositing = False
        self._target_eid = 0
        # Set once a walk back to the spawner has been issued
        self._homing = False
        self.stats = CollectorStats()

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> bool:
        """Start collecting. Returns False when no spawner is configured."""
        if self.running:
            return True
        if self.config.spawner_pos is None:
            log.error("Spawner position not set. Use !spawner <x> <y> <z>")
            return False
        if self.config.chest_pos is None:
            log.warning("Chest position not set, drops will not be stored")

        self._handle = self.scheduler.every(
            self.config.scan_interval_ms / 1000, self.tick,
        )
        log.info("🦴 Bone Collector: STARTED (spawner %s, radius %.0f)",
                 self.config.spawner_pos, self.config.radius)
        return True

    def stop(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        self._target_eid = 0
        self._homing = False
        try:
            self.session.stop_moving()
        except SessionError as e:
            report_fault(e.fault, "Stop moving failed")
        log.info("🦴 Bone Collector: STOPPED")

    def update_positions(
        self,
        spawner: Vec3 | None = None,
        chest: Vec3 | None = None,
    ) -> None:
        """Apply new spawner/chest positions to the running collector."""
        changes = {}
        if spawner is not None:
            changes["spawner_pos"] = spawner
        if chest is not None:
            changes["chest_pos"] = chest
        if changes:
            self.config = replace(self.config, **changes)
            self._target_eid = 0
            self._homing = False

    # ---- Decision tick ----

    def tick(self) -> None:
        if not self.session.connected or self._depositing:
            return
        spawner = self.config.spawner_pos
        if spawner is None:
            return
        self.stats.ticks += 1

        try:
            if self.config.chest_pos is not None and self.session.inventory_full():
                self._begin_deposit(self.config.chest_pos)
                return

            drop = self.nearest_drop(spawner)
            if drop is None:
                if not self._homing:
                    log.debug("no drops, back to spawner")
                    self._target_eid = 0
                    self.session.move_near(spawner, reach=2)
                    self._homing = True
                return

            self._homing = False

            if drop.entity_id != self._target_eid:
                self._target_eid = drop.entity_id
                block = Vec3(math.floor(drop.x), math.floor(drop.y), math.floor(drop.z))
                self.session.move_near(block, reach=0)
                self.stats.moves += 1
                log.debug("collect eid=%d %s x%d", drop.entity_id, drop.name, drop.count)
        except SessionError as e:
            report_fault(e.fault, "Bone collector")

    def nearest_drop(self, center: Vec3) -> DroppedItem | None:
        drops = self.session.dropped_items(center, self.config.radius)
        if not drops:
            return None
        return min(drops, key=lambda d: d.distance_to(center))

    # ---- Chest deposit ----

    def _begin_deposit(self, chest: Vec3) -> None:
        self._depositing = True
        self._target_eid = 0
        self._homing = False
        log.info("🦴 Inventory full, storing %s in chest at %s", self.config.item, chest)
        self._offload(lambda: self._deposit(chest))

    def _deposit(self, chest: Vec3) -> None:
        try:
            count = self.session.deposit(chest, self.config.item)
        except SessionError as e:
            report_fault(e.fault, "Deposit failed")
        else:
            self.stats.deposits += 1
            self.stats.items_deposited += count
            log.info("🦴 Stored %d %s", count, self.config.item)
        finally:
            self._depositing = False

    def status_line(self) -> str:
        if not self.running:
            return "bones=off"
        return f"bones=on stored={self.stats.items_deposited}"

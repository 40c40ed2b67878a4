"""Tests for BoneCollector — drop pickup and chest deposit."""

import logging

import pytest

from src.bot.bones import BoneCollector
from src.data.config import BoneCollectorConfig, Vec3
from src.session.client import DroppedItem
from src.session.errors import FaultKind, SessionFault

SPAWNER = Vec3(100, 64, -200)
CHEST = Vec3(103, 64, -200)


def _drop(eid: int, dx: float, name: str = "bone", count: int = 1) -> DroppedItem:
    return DroppedItem(
        entity_id=eid, name=name, count=count,
        x=SPAWNER.x + 0.5 + dx, y=SPAWNER.y, z=SPAWNER.z + 0.5,
    )


@pytest.fixture
def collector(session, scheduler) -> BoneCollector:
    config = BoneCollectorConfig(spawner_pos=SPAWNER, chest_pos=CHEST, radius=8, scan_interval_ms=1000)
    return BoneCollector(session, scheduler, config)


class TestStartStop:

    def test_start_requires_spawner(self, session, scheduler, logged):
        bones = BoneCollector(session, scheduler)
        assert bones.start() is False
        assert not bones.running
        assert "Spawner position not set. Use !spawner <x> <y> <z>" in logged(logging.ERROR)

    def test_start_and_stop(self, collector, session, scheduler):
        assert collector.start()
        assert collector.running
        assert len(scheduler.active) == 1
        collector.stop()
        assert not collector.running
        assert session.stopped == 1
        assert scheduler.active == []

    def test_start_twice_one_timer(self, collector, scheduler):
        collector.start()
        collector.start()
        assert len(scheduler.active) == 1

    def test_warns_without_chest(self, session, scheduler, logged):
        bones = BoneCollector(session, scheduler, BoneCollectorConfig(spawner_pos=SPAWNER))
        bones.start()
        assert any("Chest position not set" in m for m in logged(logging.WARNING))


class TestTick:

    def test_moves_to_nearest_drop(self, collector, session, scheduler):
        session.drops = [_drop(1, 5.0), _drop(2, 1.0), _drop(3, 20.0)]
        collector.start()
        scheduler.advance(1)
        assert len(session.moves) == 1
        target, reach = session.moves[0]
        assert target == Vec3(101, 64, -200)
        assert reach == 0

    def test_does_not_repeat_goal_for_same_target(self, collector, session, scheduler):
        session.drops = [_drop(1, 2.0)]
        collector.start()
        scheduler.advance(3)
        assert len(session.moves) == 1
        assert collector.stats.ticks == 3

    def test_returns_to_spawner_when_drops_gone(self, collector, session, scheduler):
        session.drops = [_drop(1, 2.0)]
        collector.start()
        scheduler.advance(1)
        session.drops = []
        scheduler.advance(1)
        assert session.moves[-1] == (SPAWNER, 2)

    def test_ignores_drops_outside_radius(self, collector, session, scheduler):
        session.drops = [_drop(1, 30.0)]
        collector.start()
        scheduler.advance(2)
        assert session.moves == [(SPAWNER, 2)]

    def test_walks_to_spawner_once_when_idle(self, collector, session, scheduler):
        collector.start()
        scheduler.advance(5)
        assert session.moves == [(SPAWNER, 2)]

    def test_returns_to_spawner_after_deposit(self, collector, session, scheduler):
        collector.start()
        scheduler.advance(1)
        session.moves.clear()

        session.full = True
        scheduler.advance(1)
        assert session.deposits == [(CHEST, "bone")]
        assert session.moves == []

        scheduler.advance(5)
        assert session.moves == [(SPAWNER, 2)]

    def test_heads_home_again_after_collecting(self, collector, session, scheduler):
        collector.start()
        scheduler.advance(1)
        session.drops = [_drop(1, 2.0)]
        scheduler.advance(1)
        session.drops = []
        scheduler.advance(3)
        assert session.moves == [(SPAWNER, 2), (Vec3(102, 64, -200), 0), (SPAWNER, 2)]

    def test_deposits_when_inventory_full(self, collector, session, scheduler):
        session.full = True
        session.drops = [_drop(1, 1.0)]
        collector.start()
        scheduler.advance(1)
        assert session.deposits == [(CHEST, "bone")]
        assert session.moves == []
        assert collector.stats.deposits == 1
        assert collector.stats.items_deposited == 64

    def test_no_deposit_without_chest(self, session, scheduler):
        bones = BoneCollector(session, scheduler, BoneCollectorConfig(spawner_pos=SPAWNER))
        session.full = True
        session.drops = [_drop(1, 1.0)]
        bones.start()
        scheduler.advance(1)
        assert session.deposits == []
        assert len(session.moves) == 1

    def test_deposit_is_offloaded(self, session, scheduler):
        queued = []
        bones = BoneCollector(
            session, scheduler,
            BoneCollectorConfig(spawner_pos=SPAWNER, chest_pos=CHEST),
            offload=queued.append,
        )
        session.full = True
        bones.start()
        scheduler.advance(1)
        assert len(queued) == 1
        assert session.deposits == []

        # Ticks while the deposit is in flight do nothing
        scheduler.advance(2)
        assert len(queued) == 1

        queued[0]()
        assert session.deposits == [(CHEST, "bone")]
        scheduler.advance(1)
        assert not bones._depositing

    def test_idle_when_offline(self, collector, offline_session, scheduler):
        collector.session = offline_session
        offline_session.drops = [_drop(1, 1.0)]
        collector.start()
        scheduler.advance(3)
        assert offline_session.moves == []
        assert collector.stats.ticks == 0

    def test_session_error_reported(self, collector, session, scheduler, logged):
        session.fail_with = SessionFault(FaultKind.PROTOCOL, "Error", "path blocked")
        collector.start()
        scheduler.advance(1)
        assert collector.running
        assert any("path blocked" in m for m in logged(logging.ERROR))


def test_update_positions(collector):
    collector.update_positions(spawner=Vec3(0, 70, 0))
    assert collector.config.spawner_pos == Vec3(0, 70, 0)
    assert collector.config.chest_pos == CHEST
    collector.update_positions(chest=Vec3(1, 70, 0))
    assert collector.config.chest_pos == Vec3(1, 70, 0)


def test_status_line(collector):
    assert collector.status_line() == "bones=off"
    collector.start()
    assert collector.status_line() == "bones=on stored=0"

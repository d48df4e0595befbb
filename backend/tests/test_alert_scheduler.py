"""AlertScheduler lifecycle: arm, re-arm, retarget, release and shutdown."""
from __future__ import annotations

import threading
import time

import pytest

from alerts import AlertTick
from proximity import UNLOCKED, Locked
from tests.fakes import FakePlayback, make_pin


def _lock(pin_id: str, distance: float) -> Locked:
    return Locked(pin=make_pin(pin_id, north_m=distance), distance_m=distance)


def _alert_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name.startswith("alert-") and t.is_alive()]


# ---------- Idle / Active transitions ----------

class TestTransitions:
    def test_starts_idle(self, scheduler_factory):
        scheduler = scheduler_factory()
        assert scheduler.session is None
        assert not scheduler.is_active

    def test_lock_arms_session(self, scheduler_factory):
        scheduler = scheduler_factory()
        session = scheduler.update(_lock("a", 5.0))
        assert session is not None
        assert session.pin_id == "a"
        assert session.schedule.interval_ms == 500
        assert session.schedule.tone_frequency_hz == pytest.approx(900.0)
        assert scheduler.is_active

    def test_unlocked_while_idle_is_noop(self, scheduler_factory):
        scheduler = scheduler_factory()
        assert scheduler.update(UNLOCKED) is None
        assert scheduler.session is None

    def test_same_pin_same_distance_keeps_session(self, scheduler_factory):
        scheduler = scheduler_factory()
        first = scheduler.update(_lock("a", 5.0))
        second = scheduler.update(_lock("a", 5.0))
        assert second is first
        assert first.is_alive

    def test_distance_change_rearms(self, scheduler_factory):
        scheduler = scheduler_factory()
        first = scheduler.update(_lock("a", 9.0))
        second = scheduler.update(_lock("a", 3.0))
        assert second is not first
        assert first.is_cancelled
        assert not first.is_alive
        assert second.schedule.interval_ms == 300
        assert second.is_alive

    def test_unlock_releases_session(self, scheduler_factory):
        scheduler = scheduler_factory()
        session = scheduler.update(_lock("a", 2.0))
        assert scheduler.update(UNLOCKED) is None
        assert not session.is_alive
        assert scheduler.session is None
        assert not scheduler.is_active

    def test_target_change_leaves_exactly_one_timer(self, scheduler_factory):
        scheduler = scheduler_factory()
        session_a = scheduler.update(_lock("A", 10.0))
        session_b = scheduler.update(_lock("B", 4.0))
        assert not session_a.is_alive
        assert session_b.is_alive
        assert session_b.pin_id == "B"
        assert session_b.schedule.interval_ms == 400
        assert session_b.schedule.tone_frequency_hz == pytest.approx(960.0)
        assert [t.name for t in _alert_threads()] == ["alert-B"]

    def test_many_updates_never_overlap(self, scheduler_factory):
        scheduler = scheduler_factory()
        for i in range(20):
            scheduler.update(_lock(f"p{i % 3}", 1.0 + i * 0.5))
            assert len(_alert_threads()) == 1

    def test_shutdown_cancels_and_blocks_new_sessions(self, scheduler_factory):
        scheduler = scheduler_factory()
        session = scheduler.update(_lock("a", 2.0))
        scheduler.shutdown()
        assert not session.is_alive
        assert scheduler.update(_lock("a", 1.0)) is None
        assert _alert_threads() == []


# ---------- Cue emission ----------

class TestEmission:
    def test_ticks_at_schedule_cadence(self, scheduler_factory, fake_playback):
        scheduler = scheduler_factory()
        scheduler.update(_lock("a", 1.0))  # 150 ms, 1140 Hz
        assert fake_playback.wait_for(3, timeout=2.0)
        assert all(freq == pytest.approx(1140.0) for freq in fake_playback.frequencies())
        assert all(duration == 100 for _, duration in fake_playback.calls)

    def test_no_tick_before_first_interval(self, scheduler_factory, fake_playback):
        scheduler = scheduler_factory()
        scheduler.update(_lock("a", 10.0))  # 1000 ms
        time.sleep(0.2)
        assert fake_playback.count == 0

    def test_emission_stops_after_unlock(self, scheduler_factory, fake_playback):
        scheduler = scheduler_factory()
        scheduler.update(_lock("a", 1.0))
        assert fake_playback.wait_for(1)
        scheduler.update(UNLOCKED)
        count = fake_playback.count
        time.sleep(0.4)
        assert fake_playback.count == count

    def test_retarget_switches_frequency(self, scheduler_factory, fake_playback):
        scheduler = scheduler_factory()
        scheduler.update(_lock("A", 1.0))
        assert fake_playback.wait_for(1)
        scheduler.update(_lock("B", 0.5))  # 150 ms, 1170 Hz
        count = fake_playback.count
        assert fake_playback.wait_for(count + 2)
        assert all(freq == pytest.approx(1170.0) for freq in fake_playback.frequencies()[count:])

    def test_playback_failure_is_not_fatal(self, scheduler_factory):
        failing = FakePlayback(fail=True)
        scheduler = scheduler_factory(playback=failing)
        session = scheduler.update(_lock("a", 1.0))
        assert failing.wait_for(2)
        assert session.is_alive

    def test_runs_without_playback(self, scheduler_factory):
        scheduler = scheduler_factory(playback=None)
        ticks: list[AlertTick] = []
        scheduler.subscribe(ticks.append)
        scheduler.update(_lock("a", 1.0))
        time.sleep(0.4)
        assert ticks


# ---------- Subscriptions ----------

class TestSubscriptions:
    def test_subscriber_receives_ticks(self, scheduler_factory):
        scheduler = scheduler_factory()
        ticks: list[AlertTick] = []
        scheduler.subscribe(ticks.append)
        scheduler.update(_lock("a", 1.0))
        time.sleep(0.5)
        assert len(ticks) >= 2
        assert ticks[0].pin_id == "a"
        assert ticks[0].frequency_hz == pytest.approx(1140.0)
        assert ticks[0].interval_ms == 150
        assert [t.sequence for t in ticks[:2]] == [0, 1]

    def test_unsubscribe_stops_delivery(self, scheduler_factory):
        scheduler = scheduler_factory()
        ticks: list[AlertTick] = []
        unsubscribe = scheduler.subscribe(ticks.append)
        unsubscribe()
        scheduler.update(_lock("a", 1.0))
        time.sleep(0.4)
        assert ticks == []

    def test_failing_subscriber_does_not_block_others(self, scheduler_factory):
        scheduler = scheduler_factory()
        ticks: list[AlertTick] = []

        def _boom(_tick):
            raise ValueError("subscriber bug")

        scheduler.subscribe(_boom)
        scheduler.subscribe(ticks.append)
        scheduler.update(_lock("a", 1.0))
        time.sleep(0.4)
        assert ticks

    def test_session_to_dict(self, scheduler_factory):
        scheduler = scheduler_factory()
        session = scheduler.update(_lock("a", 5.0))
        data = session.to_dict()
        assert data["pin_id"] == "a"
        assert data["interval_ms"] == 500
        assert data["status"] == "active"
        scheduler.update(UNLOCKED)
        assert session.to_dict()["status"] == "stopped"


# ---------- Slow playback ----------

class TestSlowPlayback:
    def test_stuck_cue_never_overlaps_next_session(self, scheduler_factory):
        slow = FakePlayback(delay=0.5)
        scheduler = scheduler_factory(playback=slow, join_timeout_seconds=0.05)
        session_a = scheduler.update(_lock("A", 1.0))  # 150 ms, 1140 Hz
        assert slow.wait_for(1)

        # A is still inside emit_tone, so the join times out
        session_b = scheduler.update(_lock("B", 0.5))  # 150 ms, 1170 Hz
        assert session_a.is_cancelled
        assert slow.wait_for(3, timeout=3.0)

        assert slow.max_in_flight == 1
        assert all(freq == pytest.approx(1170.0) for freq in slow.frequencies()[1:])
        session_a.thread.join(timeout=1.0)
        assert not session_a.is_alive
        assert [t.name for t in _alert_threads()] == ["alert-B"]

        scheduler.shutdown()
        session_b.thread.join(timeout=2.0)
        assert _alert_threads() == []

    def test_cancelled_session_does_not_emit(self, scheduler_factory):
        slow = FakePlayback(delay=0.3)
        scheduler = scheduler_factory(playback=slow, join_timeout_seconds=0.05)
        session = scheduler.update(_lock("a", 1.0))
        assert slow.wait_for(1)
        scheduler.update(UNLOCKED)
        session.thread.join(timeout=1.0)
        time.sleep(0.3)
        assert slow.count == 1

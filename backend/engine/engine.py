"""Proximity engine: position and pin updates in, render and alert outputs out."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

from alerts.playback import ToneEmitter
from alerts.schedule import AlertSchedule, schedule_for
from alerts.scheduler import AlertCallback, AlertScheduler
from common.config import EngineConfig
from common.types import GeoPosition, Pin, TrackedPin
from mapping.geo_utils import bearing_to_clock_hour, is_finite_point
from mapping.projection import map_for_overlay, map_for_radar, project_to_viewport
from mapping.viewport import Viewport
from proximity.resolver import resolve
from proximity.types import Locked, LockState, Resolution
from storage.pins import PinStore

logger = logging.getLogger(__name__)

STATUS_LOCKED = "SIGNAL_LOCKED"
STATUS_SCANNING = "SCANNING_ENVIRONMENT"


@dataclass(frozen=True)
class EngineSnapshot:
    """Everything derived from one (position, pin set) pair."""
    position: GeoPosition | None = None
    pins: tuple[Pin, ...] = ()
    resolution: Resolution = field(default_factory=Resolution)
    tracked_pins: tuple[TrackedPin, ...] = ()
    schedule: AlertSchedule | None = None

    @property
    def lock(self) -> LockState:
        return self.resolution.lock


class ProximityEngine:
    """
    Single logical evaluator for the proximity pipeline.

    Every position or pin-set change runs the resolver to completion, builds
    a new immutable snapshot, publishes it, and only then hands the lock
    state to the alert scheduler. Readers always see one whole snapshot.
    """

    def __init__(
        self,
        pin_store: PinStore,
        playback: ToneEmitter | None = None,
        config: EngineConfig | None = None,
        scheduler: AlertScheduler | None = None,
    ):
        self._store = pin_store
        self._config = config or EngineConfig()
        self._scheduler = scheduler or AlertScheduler(playback=playback)
        self._lock = threading.Lock()
        self._position: GeoPosition | None = None
        self._pins: tuple[Pin, ...] = tuple(pin_store.list_pins())
        self._snapshot = EngineSnapshot()

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def scheduler(self) -> AlertScheduler:
        return self._scheduler

    @property
    def snapshot(self) -> EngineSnapshot:
        return self._snapshot

    def update_position(self, position: GeoPosition | None) -> EngineSnapshot:
        with self._lock:
            self._position = position
            return self._evaluate()

    def report_position_error(self, reason: str) -> EngineSnapshot:
        # Keep the last-known position; a missing fix is not fatal.
        logger.warning("Location provider error: %s", reason)
        return self._snapshot

    def refresh_pins(self) -> EngineSnapshot:
        # Read under the engine lock so a slow reader cannot publish an older pin set.
        with self._lock:
            self._pins = tuple(self._store.list_pins())
            return self._evaluate()

    def add_pin(self, pin: Pin) -> EngineSnapshot:
        self._store.add_pin(pin)
        return self.refresh_pins()

    def get_position(self) -> GeoPosition | None:
        return self._snapshot.position

    def get_tracked_pins(self) -> list[TrackedPin]:
        return list(self._snapshot.tracked_pins)

    def get_lock_state(self) -> LockState:
        return self._snapshot.lock

    def get_alert_schedule(self) -> AlertSchedule | None:
        return self._snapshot.schedule

    def subscribe(self, callback: AlertCallback) -> Callable[[], None]:
        return self._scheduler.subscribe(callback)

    def radar_points(self, radar_radius_px: float | None = None) -> list[dict]:
        radius = radar_radius_px or self._config.radar_radius_px
        snapshot = self._snapshot
        points = []
        for record in snapshot.resolution.tracked:
            point = map_for_radar(record, radius, self._config.tracking_radius_m)
            points.append(
                {
                    "pin_id": record.pin_id,
                    "x": point.x,
                    "y": point.y,
                    "is_locked": snapshot.resolution.is_target(record.pin_id),
                }
            )
        return points

    def map_points(self, viewport: Viewport) -> dict | None:
        """Plan-view positions of the user and every pin, or None without a fix."""
        snapshot = self._snapshot
        origin = snapshot.position
        if origin is None or not is_finite_point(origin):
            return None
        ux, uy = project_to_viewport(origin, origin, viewport)
        pin_points = []
        for pin in snapshot.pins:
            if not is_finite_point(pin.position):
                continue
            x, y = project_to_viewport(pin.position, origin, viewport)
            pin_points.append({"pin_id": pin.id, "title": pin.title, "x": x, "y": y})
        return {
            "user": {"x": ux, "y": uy, "accuracy_m": origin.accuracy_m},
            "pins": pin_points,
        }

    def lock_summary(self) -> dict:
        snapshot = self._snapshot
        lock = snapshot.lock
        position = snapshot.position
        summary = {
            "status": STATUS_LOCKED if lock.is_locked else STATUS_SCANNING,
            "latitude": position.latitude if position else None,
            "longitude": position.longitude if position else None,
            "accuracy_m": position.accuracy_m if position else None,
            "pin_id": None,
            "distance_m": None,
            "clock_hour": None,
            "interval_ms": None,
            "tone_frequency_hz": None,
        }
        if isinstance(lock, Locked):
            bearing = next(
                (r.bearing_deg for r in snapshot.resolution.tracked if r.pin_id == lock.pin_id),
                0.0,
            )
            summary.update(
                pin_id=lock.pin_id,
                distance_m=lock.distance_m,
                clock_hour=bearing_to_clock_hour(bearing),
                interval_ms=snapshot.schedule.interval_ms,
                tone_frequency_hz=snapshot.schedule.tone_frequency_hz,
            )
        return summary

    def shutdown(self):
        self._scheduler.shutdown()
        logger.info("Proximity engine shutdown complete")

    def _evaluate(self) -> EngineSnapshot:
        resolution = resolve(
            self._position,
            self._pins,
            tracking_radius_m=self._config.tracking_radius_m,
            lock_radius_m=self._config.lock_radius_m,
        )
        tracked_pins = tuple(
            TrackedPin(
                pin=record.pin,
                distance_m=record.distance_m,
                bearing_deg=record.bearing_deg,
                screen_point=map_for_overlay(
                    record,
                    resolution.is_target(record.pin_id),
                    self._config.overlay_px_per_degree,
                ),
                is_locked=resolution.is_target(record.pin_id),
            )
            for record in resolution.tracked
        )
        lock = resolution.lock
        snapshot = EngineSnapshot(
            position=self._position,
            pins=self._pins,
            resolution=resolution,
            tracked_pins=tracked_pins,
            schedule=schedule_for(lock.distance_m) if isinstance(lock, Locked) else None,
        )
        self._snapshot = snapshot
        self._scheduler.update(lock)
        return snapshot

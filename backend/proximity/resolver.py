"""Proximity resolution: which pins are tracked and which one is locked."""
from __future__ import annotations

import logging
from typing import Iterable

from common.config import DEFAULT_LOCK_RADIUS_M, DEFAULT_TRACKING_RADIUS_M
from common.types import GeoPoint, Pin
from mapping.geo_utils import distance_bearing, is_finite_point
from proximity.types import UNLOCKED, Locked, LockState, ProximityRecord, Resolution

logger = logging.getLogger(__name__)


def _sort_key(record: ProximityRecord) -> tuple[float, str]:
    return record.distance_m, record.pin.id


def compute_records(user: GeoPoint, pins: Iterable[Pin]) -> list[ProximityRecord]:
    """Distance and bearing for every pin with usable coordinates."""
    records: list[ProximityRecord] = []
    for pin in pins:
        if not is_finite_point(pin.position):
            logger.debug("Skipping pin '%s' with non-finite coordinates", pin.id)
            continue
        distance, bearing = distance_bearing(user, pin.position)
        records.append(ProximityRecord(pin=pin, distance_m=distance, bearing_deg=bearing))
    return records


def select_lock(
    tracked: tuple[ProximityRecord, ...],
    lock_radius_m: float = DEFAULT_LOCK_RADIUS_M,
) -> LockState:
    if not tracked:
        return UNLOCKED
    closest = min(tracked, key=_sort_key)
    if closest.distance_m < lock_radius_m:
        return Locked(pin=closest.pin, distance_m=closest.distance_m)
    return UNLOCKED


def resolve(
    user: GeoPoint | None,
    pins: Iterable[Pin],
    tracking_radius_m: float = DEFAULT_TRACKING_RADIUS_M,
    lock_radius_m: float = DEFAULT_LOCK_RADIUS_M,
) -> Resolution:
    """
    Resolve tracked pins and the lock target for one user position.

    Args:
        user: Current user position, or None before the first fix.
        pins: Pin snapshot for this cycle.
        tracking_radius_m: Pins at or beyond this distance are ignored.
        lock_radius_m: The closest tracked pin locks when strictly inside this.

    Returns:
        Tracked records ordered by (distance, pin id) and the lock state.
    """
    if user is None or not is_finite_point(user):
        return Resolution()

    tracked = tuple(
        sorted(
            (r for r in compute_records(user, pins) if r.distance_m < tracking_radius_m),
            key=_sort_key,
        )
    )
    return Resolution(tracked=tracked, lock=select_lock(tracked, lock_radius_m))

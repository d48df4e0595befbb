"""
Derived, per-cycle values of the proximity engine.

All of these are recomputed from scratch whenever the user position or the
pin set changes and are never mutated in place.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from common.types import Pin


@dataclass(frozen=True)
class ProximityRecord:
    """Distance and bearing from the user to one pin."""
    pin: Pin
    distance_m: float
    bearing_deg: float  # (-180, 180], 0 = north, clockwise positive

    @property
    def pin_id(self) -> str:
        return self.pin.id


@dataclass(frozen=True)
class Unlocked:
    """No pin is close enough to be the alert target."""

    @property
    def is_locked(self) -> bool:
        return False


@dataclass(frozen=True)
class Locked:
    """Exactly one pin is the active alert target."""
    pin: Pin
    distance_m: float

    @property
    def is_locked(self) -> bool:
        return True

    @property
    def pin_id(self) -> str:
        return self.pin.id


LockState = Union[Unlocked, Locked]

UNLOCKED = Unlocked()


@dataclass(frozen=True)
class Resolution:
    """Resolver output for one evaluation cycle."""
    tracked: tuple[ProximityRecord, ...] = field(default_factory=tuple)
    lock: LockState = UNLOCKED

    def is_target(self, pin_id: str) -> bool:
        return isinstance(self.lock, Locked) and self.lock.pin_id == pin_id

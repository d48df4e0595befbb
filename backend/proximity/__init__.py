"""Proximity resolution package."""

from .resolver import compute_records, resolve, select_lock
from .types import UNLOCKED, Locked, LockState, ProximityRecord, Resolution, Unlocked

__all__ = [
    "UNLOCKED",
    "LockState",
    "Locked",
    "ProximityRecord",
    "Resolution",
    "Unlocked",
    "compute_records",
    "resolve",
    "select_lock",
]

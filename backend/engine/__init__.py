"""Proximity engine package."""

from .engine import EngineSnapshot, ProximityEngine

__all__ = ["EngineSnapshot", "ProximityEngine"]

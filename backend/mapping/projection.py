# projection.py
from __future__ import annotations

import math
from dataclasses import dataclass

from common.config import (
    LOCKED_OVERLAY_SCALE,
    MAX_OVERLAY_SCALE,
    MIN_OVERLAY_OPACITY,
    MIN_OVERLAY_SCALE,
    OVERLAY_BASE_Z_ORDER,
    OVERLAY_FALLOFF_M,
    OVERLAY_PX_PER_DEGREE,
)
from common.types import GeoPoint, ScreenPoint
from proximity.types import ProximityRecord

from .geo_utils import to_local_offset
from .viewport import Viewport


@dataclass(frozen=True)
class RadarPoint:
    """Offset from the radar centre in pixels (y grows downward)."""
    x: float
    y: float


def project_to_viewport(
    position: GeoPoint,
    origin: GeoPoint,
    viewport: Viewport,
) -> tuple[float, float]:
    """
    Place a geographic point on a 2D canvas centred on origin.

    Uses the same small-area offset as the proximity calculations, so map,
    radar and overlay never disagree on where a pin is.
    """
    offset = to_local_offset(origin, position)
    cx, cy = viewport.center
    x = cx + offset.dx_m * viewport.pixels_per_meter
    y = cy - offset.dy_m * viewport.pixels_per_meter
    return x, y


def map_for_radar(
    record: ProximityRecord,
    radar_radius_px: float,
    tracking_radius_m: float,
) -> RadarPoint:
    r = (record.distance_m / tracking_radius_m) * radar_radius_px
    # Rotate so that bearing 0 renders at the top of the radar
    rad = math.radians(record.bearing_deg - 90)
    return RadarPoint(x=math.cos(rad) * r, y=math.sin(rad) * r)


def overlay_scale(distance_m: float, is_locked: bool) -> float:
    if is_locked:
        return LOCKED_OVERLAY_SCALE
    return max(MIN_OVERLAY_SCALE, MAX_OVERLAY_SCALE - distance_m / OVERLAY_FALLOFF_M)


def overlay_opacity(distance_m: float) -> float:
    return min(1.0, max(MIN_OVERLAY_OPACITY, 1 - distance_m / OVERLAY_FALLOFF_M))


def map_for_overlay(
    record: ProximityRecord,
    is_locked: bool,
    px_per_degree: float = OVERLAY_PX_PER_DEGREE,
) -> ScreenPoint:
    return ScreenPoint(
        x=record.bearing_deg * px_per_degree,
        y=0.0,
        scale=overlay_scale(record.distance_m, is_locked),
        opacity=overlay_opacity(record.distance_m),
        z_order=OVERLAY_BASE_Z_ORDER - round(record.distance_m),
    )

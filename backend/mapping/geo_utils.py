# geo_utils.py
from __future__ import annotations

import math
from dataclasses import dataclass

from common.config import METERS_PER_DEGREE
from common.types import GeoPoint


@dataclass(frozen=True)
class LocalOffset:
    """Planar offset from an origin in meters (+x east, +y north)."""
    dx_m: float
    dy_m: float


def meters_per_degree_lon(latitude: float) -> float:
    return METERS_PER_DEGREE * math.cos(math.radians(latitude))


def to_local_offset(origin: GeoPoint, target: GeoPoint) -> LocalOffset:
    """
    Equirectangular offset from origin to target.

    Only accurate for separations up to a few hundred meters; this is not a
    geodesic solver.
    """
    dy = (target.latitude - origin.latitude) * METERS_PER_DEGREE
    dx = (target.longitude - origin.longitude) * meters_per_degree_lon(origin.latitude)
    return LocalOffset(dx_m=dx, dy_m=dy)


def wrap_angle_deg(angle):
    # Half-open on the negative side: (-180, 180]
    wrapped = (angle + 180) % 360 - 180
    return 180.0 if wrapped == -180 else wrapped


def to_distance_bearing(dx_m: float, dy_m: float) -> tuple[float, float]:
    """Return (distance_m, bearing_deg); bearing 0 is north, clockwise positive."""
    distance = math.hypot(dx_m, dy_m)
    if distance == 0:
        return 0.0, 0.0
    bearing = math.degrees(math.atan2(dx_m, dy_m))
    return distance, wrap_angle_deg(bearing)


def distance_bearing(origin: GeoPoint, target: GeoPoint) -> tuple[float, float]:
    offset = to_local_offset(origin, target)
    return to_distance_bearing(offset.dx_m, offset.dy_m)


def is_finite_point(point: GeoPoint) -> bool:
    return math.isfinite(point.latitude) and math.isfinite(point.longitude)


def bearing_to_clock_hour(bearing: float) -> int:
    """Clock-face direction of a bearing, 12 being straight ahead (north)."""
    hour = round(wrap_angle_deg(bearing) / 30.0) % 12
    return 12 if hour == 0 else hour

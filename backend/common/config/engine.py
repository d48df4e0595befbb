"""Proximity engine and alert configuration."""
from __future__ import annotations

import os

from pydantic import BaseModel, Field

from .paths import BASE_DIR  # noqa: F401  .env must load first

# Equirectangular small-area approximation
METERS_PER_DEGREE = 111_320.0

# Lock acquisition has no hysteresis band: unlock is instant at LOCK_RADIUS_M.
DEFAULT_TRACKING_RADIUS_M = 200.0
DEFAULT_LOCK_RADIUS_M = 12.0

# Screen-space defaults
DEFAULT_RADAR_RADIUS_PX = 60.0
DEFAULT_OVERLAY_PX_PER_DEGREE = 8.0
DEFAULT_MAP_PROJECTION_SCALE = 3_500_000.0  # d3-style Mercator scale (pixels per radian)
OVERLAY_FALLOFF_M = 150.0
LOCKED_OVERLAY_SCALE = 1.6
MIN_OVERLAY_SCALE = 0.3
MAX_OVERLAY_SCALE = 1.2
MIN_OVERLAY_OPACITY = 0.1
OVERLAY_BASE_Z_ORDER = 100

# Alert cadence and pitch
MIN_INTERVAL_MS = 150
MAX_INTERVAL_MS = 1000
INTERVAL_MS_PER_METER = 100.0
BASE_TONE_HZ = 1200.0
MIN_TONE_HZ = 440.0
TONE_HZ_PER_METER = 60.0

# Cue waveform
CUE_START_GAIN = 0.05
CUE_END_GAIN = 0.001


class EngineConfig(BaseModel):
    tracking_radius_m: float = Field(
        default_factory=lambda: float(os.getenv("TRACKING_RADIUS_M", str(DEFAULT_TRACKING_RADIUS_M))),
        gt=0,
    )
    lock_radius_m: float = Field(
        default_factory=lambda: float(os.getenv("LOCK_RADIUS_M", str(DEFAULT_LOCK_RADIUS_M))),
        gt=0,
    )
    radar_radius_px: float = Field(
        default_factory=lambda: float(os.getenv("RADAR_RADIUS_PX", str(DEFAULT_RADAR_RADIUS_PX))),
        gt=0,
    )
    overlay_px_per_degree: float = Field(
        default_factory=lambda: float(
            os.getenv("OVERLAY_PX_PER_DEGREE", str(DEFAULT_OVERLAY_PX_PER_DEGREE))
        ),
    )
    map_projection_scale: float = Field(
        default_factory=lambda: float(
            os.getenv("MAP_PROJECTION_SCALE", str(DEFAULT_MAP_PROJECTION_SCALE))
        ),
        gt=0,
    )


class AlertConfig(BaseModel):
    cue_duration_ms: int = Field(
        default_factory=lambda: int(os.getenv("ALERT_CUE_DURATION_MS", "100")),
        gt=0,
    )
    cue_sample_rate: int = Field(
        default_factory=lambda: int(os.getenv("ALERT_CUE_SAMPLE_RATE", "22050")),
        gt=0,
    )
    session_join_timeout_sec: float = Field(
        default_factory=lambda: float(os.getenv("ALERT_SESSION_JOIN_TIMEOUT_SEC", "1.0")),
        ge=0,
    )


engine_config = EngineConfig()
alert_config = AlertConfig()

# Convenience constants
TRACKING_RADIUS_M = engine_config.tracking_radius_m
LOCK_RADIUS_M = engine_config.lock_radius_m
RADAR_RADIUS_PX = engine_config.radar_radius_px
OVERLAY_PX_PER_DEGREE = engine_config.overlay_px_per_degree
MAP_PROJECTION_SCALE = engine_config.map_projection_scale
CUE_DURATION_MS = alert_config.cue_duration_ms
CUE_SAMPLE_RATE = alert_config.cue_sample_rate

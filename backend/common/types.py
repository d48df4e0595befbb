"""
Pydantic models shared by the engine and the API.

Positions and pins arrive from outside collaborators and are validated here.
Screen hints leave the engine through the same models.
"""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """A latitude/longitude pair in decimal degrees."""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class GeoPosition(GeoPoint):
    """
    Snapshot from the location provider.
    Replaced wholesale on every update, never mutated.
    """
    accuracy_m: float = Field(default=0.0, ge=0)  # Horizontal accuracy radius (meters)


class Pin(BaseModel):
    """
    A geotagged audio artifact.
    Owned by the pin store; read-only for one evaluation cycle.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    position: GeoPoint
    title: str = ""
    creator: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    audio_ref: str = ""               # Opaque reference to the recorded audio
    visual_ref: str | None = None     # Opaque reference to the pin artwork


class ScreenPoint(BaseModel):
    """Render hint for the overlay view. Derived per cycle, never stored."""
    model_config = ConfigDict(frozen=True)

    x: float                               # Horizontal offset from view centre (pixels)
    y: float                               # Vertical offset from view centre (pixels)
    scale: float
    opacity: float = Field(..., ge=0, le=1)
    z_order: int                           # Nearer pins draw on top


class TrackedPin(BaseModel):
    """
    A pin inside the tracking radius.
    This is what the presentation layer receives and renders.
    """
    pin: Pin
    distance_m: float
    bearing_deg: float
    screen_point: ScreenPoint
    is_locked: bool = False

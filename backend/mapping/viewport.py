# viewport.py
import math

from pydantic import BaseModel, Field

from common.config import MAP_PROJECTION_SCALE, METERS_PER_DEGREE


def scale_to_pixels_per_meter(projection_scale: float) -> float:
    # A Mercator scale is pixels per radian of longitude at the equator.
    return projection_scale * math.radians(1.0) / METERS_PER_DEGREE


class Viewport(BaseModel):
    width: int = Field(default=390, gt=0)
    height: int = Field(default=844, gt=0)
    pixels_per_meter: float = Field(
        default_factory=lambda: scale_to_pixels_per_meter(MAP_PROJECTION_SCALE),
        gt=0,
    )

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2

"""
Local flat-earth conversion between meter offsets and GPS degrees
"""

import math
from dataclasses import dataclass
from typing import Tuple

METERS_PER_DEGREE = 111320.0
EPSILON = 1e-3

@dataclass(frozen=True)
class LocalFrame:
    """
    North/east meter offsets around a fixed origin.

    The meters-to-degrees scale factors are constant for the whole frame, so
    every point is computed from the origin and never from a moving reference.
    """
    lat0: float
    lon0: float

    @property
    def lat_per_meter(self) -> float:
        return 1.0 / METERS_PER_DEGREE

    @property
    def lon_per_meter(self) -> float:
        cos_lat = max(math.cos(math.radians(self.lat0)), EPSILON)
        return 1.0 / (METERS_PER_DEGREE * cos_lat)

    def to_global(self, north_m: float, east_m: float) -> Tuple[float, float]:
        """Convert a (north, east) offset in meters to (lat, lon) degrees"""
        return (
            self.lat0 + north_m * self.lat_per_meter,
            self.lon0 + east_m * self.lon_per_meter,
        )

    def to_local(self, lat: float, lon: float) -> Tuple[float, float]:
        """Convert (lat, lon) degrees back to a (north, east) offset in meters"""
        return (
            (lat - self.lat0) / self.lat_per_meter,
            (lon - self.lon0) / self.lon_per_meter,
        )

"""Data model for the user's position."""

from __future__ import annotations

import math
from dataclasses import dataclass

from trail_export.core.constants import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
)
from trail_export.models.geometry import Coordinate


@dataclass(frozen=True, slots=True)
class UserLocation:
    """A position fix reported by the location provider.

    Attributes:
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
        accuracy: Reported accuracy radius in metres.
        captured_at: Epoch seconds at which the fix was stored.
    """

    latitude: float
    longitude: float
    accuracy: float = 0.0
    captured_at: float = 0.0

    def is_valid(self) -> bool:
        """Whether both coordinates are finite and inside WGS 84 bounds."""
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and MIN_LATITUDE <= self.latitude <= MAX_LATITUDE
            and MIN_LONGITUDE <= self.longitude <= MAX_LONGITUDE
        )

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lon=self.longitude, lat=self.latitude)

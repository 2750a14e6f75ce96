"""Data model for route coordinates.

A ``Coordinate`` is a single ``(lon, lat)`` position with an optional
elevation, as found in a GeoJSON ``LineString``.  ``RouteEndpoints``
holds the first and last coordinate of a route.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from trail_export.core.constants import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
)
from trail_export.core.exceptions import InvalidCoordinateError, InvalidGeometryError

LINE_STRING = "LineString"
MULTI_LINE_STRING = "MultiLineString"
FEATURE = "Feature"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A WGS 84 position.

    Attributes:
        lon: Longitude in degrees.
        lat: Latitude in degrees.
        ele: Elevation in metres, ``None`` when the source had none.
    """

    lon: float
    lat: float
    ele: float | None = None

    @classmethod
    def from_position(cls, position: Sequence[float]) -> Coordinate:
        """Build a coordinate from a GeoJSON position ``[lon, lat(, ele)]``.

        Raises:
            InvalidGeometryError: If the position has fewer than two
                numeric members.
        """
        if isinstance(position, (str, bytes)) or not isinstance(position, Sequence):
            msg = f"Position must be a [lon, lat] sequence, got {type(position).__name__}"
            raise InvalidGeometryError(msg)
        if len(position) < 2:
            msg = f"Position needs at least 2 values, got {len(position)}"
            raise InvalidGeometryError(msg)
        try:
            lon = float(position[0])
            lat = float(position[1])
            ele = float(position[2]) if len(position) > 2 and position[2] is not None else None
        except (TypeError, ValueError) as exc:
            msg = f"Position contains a non-numeric value: {list(position)!r}"
            raise InvalidGeometryError(msg) from exc
        return cls(lon=lon, lat=lat, ele=ele)

    @property
    def elevation(self) -> float:
        """Elevation in metres, ``0`` when unknown."""
        return self.ele if self.ele is not None else 0.0

    def is_in_range(self) -> bool:
        """Whether both components are finite and inside WGS 84 bounds."""
        return (
            math.isfinite(self.lon)
            and math.isfinite(self.lat)
            and MIN_LONGITUDE <= self.lon <= MAX_LONGITUDE
            and MIN_LATITUDE <= self.lat <= MAX_LATITUDE
        )

    def to_position(self) -> list[float]:
        """Serialise back to a GeoJSON position."""
        if self.ele is None:
            return [self.lon, self.lat]
        return [self.lon, self.lat, self.ele]


@dataclass(frozen=True, slots=True)
class RouteEndpoints:
    """First and last coordinate of a route geometry."""

    start: Coordinate
    end: Coordinate


def validate_wgs84_coordinate(coord: Coordinate, context: str) -> None:
    """Reject a coordinate that cannot appear in a location-bearing artifact.

    Raises:
        InvalidCoordinateError: If longitude or latitude is out of range.
    """
    if not (math.isfinite(coord.lon) and MIN_LONGITUDE <= coord.lon <= MAX_LONGITUDE):
        msg = (
            f"Longitude {coord.lon} out of WGS 84 range [{MIN_LONGITUDE}, {MAX_LONGITUDE}] "
            f"in {context}"
        )
        raise InvalidCoordinateError(msg)
    if not (math.isfinite(coord.lat) and MIN_LATITUDE <= coord.lat <= MAX_LATITUDE):
        msg = (
            f"Latitude {coord.lat} out of WGS 84 range [{MIN_LATITUDE}, {MAX_LATITUDE}] "
            f"in {context}"
        )
        raise InvalidCoordinateError(msg)


def validate_route_coordinates(coords: Sequence[Coordinate], context: str) -> None:
    """Validate every coordinate of a route.

    Raises:
        InvalidGeometryError: If the sequence is empty.
        InvalidCoordinateError: If any coordinate is out of range.
    """
    if not coords:
        msg = f"No coordinates to export for {context}"
        raise InvalidGeometryError(msg)
    for coord in coords:
        validate_wgs84_coordinate(coord, context)

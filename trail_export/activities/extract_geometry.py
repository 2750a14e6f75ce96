"""Geometry extraction activity.

Normalises the GeoJSON shapes a stored trail may have into a flat,
ordered list of ``Coordinate`` objects and into start/end endpoints.

Accepted inputs:
- a ``Feature`` wrapping a ``LineString`` or ``MultiLineString``
- a bare ``LineString`` or ``MultiLineString`` geometry
- any object exposing ``__geo_interface__`` (e.g. a shapely geometry)

A ``MultiLineString`` is flattened by concatenating its segments in
order.  Segments need not touch, so the flattened sequence may jump
between the end of one segment and the start of the next.  This is a
known approximation: the result is not guaranteed to be a contiguous
path, and consumers (GPX tracks, length on the PNG card) inherit the
jump.

Any other shape yields an empty list.  Callers treat an empty list as
fatal (``require_coordinates``), never as "skip the export".
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from trail_export.core.exceptions import InvalidGeometryError
from trail_export.models.geometry import (
    FEATURE,
    LINE_STRING,
    MULTI_LINE_STRING,
    Coordinate,
    RouteEndpoints,
)

logger = logging.getLogger("trail_export.activities.extract_geometry")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_coordinates(geometry: Mapping[str, Any] | object) -> list[Coordinate]:
    """Flatten a route geometry into an ordered coordinate list.

    Args:
        geometry: GeoJSON ``Feature`` / ``LineString`` / ``MultiLineString``.

    Returns:
        Coordinates in route order.  Empty for unsupported shapes.

    Raises:
        InvalidGeometryError: If a position inside a supported shape is
            malformed (fewer than two numbers, non-numeric values).
    """
    segments = _segments(geometry)
    return [coord for segment in segments for coord in segment]


def get_endpoints(geometry: Mapping[str, Any] | object) -> RouteEndpoints | None:
    """Return the first and last coordinate of a route geometry.

    For a ``MultiLineString`` the start is the first coordinate of the
    first non-empty segment and the end is the last coordinate of the
    last non-empty segment; the two need not be connected through the
    rest of the route.

    Returns:
        ``RouteEndpoints`` or ``None`` for unsupported or empty geometry.
    """
    segments = [segment for segment in _segments(geometry) if segment]
    if not segments:
        return None
    return RouteEndpoints(start=segments[0][0], end=segments[-1][-1])


def require_coordinates(geometry: Mapping[str, Any] | object, context: str) -> list[Coordinate]:
    """Extract coordinates, failing when there are none.

    Raises:
        InvalidGeometryError: If the geometry is unsupported or empty.
    """
    coords = extract_coordinates(geometry)
    if not coords:
        msg = f"No coordinates to export for {context!r} (geometry type: {_describe(geometry)})"
        raise InvalidGeometryError(msg)
    logger.debug("Extracted %d coordinate(s) for %s", len(coords), context)
    return coords


def route_bounds(coords: Sequence[Coordinate]) -> tuple[float, float, float, float]:
    """Compute the bounding box of a coordinate sequence.

    Returns:
        ``(min_lon, min_lat, max_lon, max_lat)``

    Raises:
        InvalidGeometryError: If ``coords`` is empty.
    """
    if not coords:
        msg = "Cannot compute bounds of an empty route"
        raise InvalidGeometryError(msg)

    from shapely.geometry import MultiPoint

    return tuple(MultiPoint([(c.lon, c.lat) for c in coords]).bounds)  # type: ignore[return-value]


def route_length_km(coords: Sequence[Coordinate]) -> float:
    """Geodesic length of the coordinate sequence in kilometres.

    Uses ``pyproj.Geod`` on the WGS 84 ellipsoid.  Flattened
    ``MultiLineString`` gaps are counted as straight hops.
    """
    if len(coords) < 2:
        return 0.0

    from pyproj import Geod

    geod = Geod(ellps="WGS84")
    length_m = geod.line_length([c.lon for c in coords], [c.lat for c in coords])
    return length_m / 1000.0


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _segments(geometry: Mapping[str, Any] | object) -> list[list[Coordinate]]:
    """Return the line segments of a supported geometry (empty otherwise)."""
    shape = _unwrap(geometry)
    if shape is None:
        return []

    geom_type = shape.get("type")
    raw = shape.get("coordinates")

    if geom_type == LINE_STRING:
        return [_positions(raw, LINE_STRING)]
    if geom_type == MULTI_LINE_STRING:
        if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
            return []
        return [_positions(line, MULTI_LINE_STRING) for line in raw]
    return []


def _unwrap(geometry: Mapping[str, Any] | object) -> Mapping[str, Any] | None:
    """Resolve ``__geo_interface__`` and ``Feature`` wrappers to a bare geometry."""
    if geometry is None:
        return None
    if not isinstance(geometry, Mapping):
        geometry = getattr(geometry, "__geo_interface__", None)
        if not isinstance(geometry, Mapping):
            return None
    if geometry.get("type") == FEATURE:
        inner = geometry.get("geometry")
        return inner if isinstance(inner, Mapping) else None
    return geometry


def _positions(raw: object, geom_type: str) -> list[Coordinate]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        return []
    coords: list[Coordinate] = []
    for idx, position in enumerate(raw):
        try:
            coords.append(Coordinate.from_position(position))
        except InvalidGeometryError as exc:
            msg = f"Malformed {geom_type} position at index {idx}: {exc.message}"
            raise InvalidGeometryError(msg) from exc
    return coords


def _describe(geometry: object) -> str:
    shape = _unwrap(geometry)
    if shape is None:
        return type(geometry).__name__
    return str(shape.get("type", "unknown"))

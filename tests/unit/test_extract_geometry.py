"""Tests for geometry extraction.

Covers:
- Feature / bare LineString / MultiLineString flattening in order
- Endpoints of LineString and MultiLineString, ``None`` for empty input
- Unsupported shapes yield no coordinates; ``require_coordinates`` fails
- Bounds and geodesic length helpers
"""

from __future__ import annotations

from typing import Any

import pytest

from trail_export.activities.extract_geometry import (
    extract_coordinates,
    get_endpoints,
    require_coordinates,
    route_bounds,
    route_length_km,
)
from trail_export.core.exceptions import InvalidGeometryError
from trail_export.models.geometry import Coordinate


class TestExtractCoordinates:
    """Flattening of supported shapes."""

    def test_bare_line_string(self, line_string: dict[str, Any]) -> None:
        coords = extract_coordinates(line_string)
        assert [c.to_position() for c in coords] == line_string["coordinates"]

    def test_feature_wrapped(
        self, trail_feature: dict[str, Any], line_string: dict[str, Any]
    ) -> None:
        assert extract_coordinates(trail_feature) == extract_coordinates(line_string)

    def test_multi_line_string_concatenates_in_order(
        self, multi_line_string: dict[str, Any]
    ) -> None:
        coords = extract_coordinates(multi_line_string)
        assert [(c.lon, c.lat) for c in coords] == [
            (20.0, 49.0),
            (20.1, 49.1),
            (20.5, 49.5),
            (20.6, 49.6),
            (20.7, 49.7),
        ]

    def test_missing_elevation_defaults_to_zero(self) -> None:
        coords = extract_coordinates({"type": "LineString", "coordinates": [[1.5, 2.5]]})
        assert coords[0].ele is None
        assert coords[0].elevation == 0.0

    @pytest.mark.parametrize(
        "geometry",
        [
            {"type": "Point", "coordinates": [19.9, 49.2]},
            {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]},
            {"type": "Feature", "geometry": None},
            {"type": "LineString"},
            None,
            "LineString",
        ],
    )
    def test_unsupported_shapes_are_empty(self, geometry: Any) -> None:
        assert extract_coordinates(geometry) == []

    def test_geo_interface_objects(self) -> None:
        from shapely.geometry import LineString

        coords = extract_coordinates(LineString([(0, 0), (1, 1)]))
        assert [(c.lon, c.lat) for c in coords] == [(0.0, 0.0), (1.0, 1.0)]

    def test_malformed_position_raises(self) -> None:
        with pytest.raises(InvalidGeometryError, match="index 1"):
            extract_coordinates({"type": "LineString", "coordinates": [[0, 0], [1]]})


class TestGetEndpoints:
    """Start/end selection."""

    def test_line_string(self) -> None:
        endpoints = get_endpoints({"type": "LineString", "coordinates": [[0, 0], [1, 1], [2, 2]]})
        assert endpoints is not None
        assert endpoints.start == Coordinate(0.0, 0.0)
        assert endpoints.end == Coordinate(2.0, 2.0)

    def test_multi_line_string_uses_first_and_last_segment(
        self, multi_line_string: dict[str, Any]
    ) -> None:
        endpoints = get_endpoints(multi_line_string)
        assert endpoints is not None
        assert endpoints.start == Coordinate(20.0, 49.0)
        assert endpoints.end == Coordinate(20.7, 49.7)

    def test_empty_multi_line_string_is_none(self) -> None:
        assert get_endpoints({"type": "MultiLineString", "coordinates": []}) is None

    def test_empty_line_string_is_none(self) -> None:
        assert get_endpoints({"type": "LineString", "coordinates": []}) is None

    def test_unsupported_is_none(self) -> None:
        assert get_endpoints({"type": "Point", "coordinates": [0, 0]}) is None


class TestRequireCoordinates:
    """Empty extraction is fatal."""

    def test_returns_coordinates(self, line_string: dict[str, Any]) -> None:
        assert len(require_coordinates(line_string, "test")) == 4

    def test_empty_raises_invalid_geometry(self) -> None:
        with pytest.raises(InvalidGeometryError) as exc_info:
            require_coordinates({"type": "Point", "coordinates": [0, 0]}, "route 'x'")
        assert exc_info.value.code == "INVALID_GEOMETRY"
        assert "Point" in exc_info.value.message


class TestRouteMeasures:
    """Bounds and length."""

    def test_bounds(self, trail_coords: list[Coordinate]) -> None:
        assert route_bounds(trail_coords) == (19.9561, 49.2257, 19.9812, 49.2325)

    def test_bounds_of_single_point(self) -> None:
        assert route_bounds([Coordinate(10.0, 20.0)]) == (10.0, 20.0, 10.0, 20.0)

    def test_length_of_one_degree_of_latitude(self) -> None:
        length = route_length_km([Coordinate(0.0, 0.0), Coordinate(0.0, 1.0)])
        assert length == pytest.approx(110.57, abs=0.01)

    def test_length_of_single_point_is_zero(self) -> None:
        assert route_length_km([Coordinate(10.0, 20.0)]) == 0.0

"""Shared pytest fixtures for the trail export test suite."""

from __future__ import annotations

import copy
from typing import Any

import numpy as np
import pytest

from trail_export.core.constants import (
    ALL_ROUTES_SOURCE_ID,
    ROUTE_CASING_LAYERS,
    ROUTE_LINE_LAYERS,
    TRANSIENT_OVERLAY_LAYERS,
)
from trail_export.models.geometry import Coordinate
from trail_export.models.location import UserLocation
from trail_export.models.snapshot import Viewport
from trail_export.providers.download import DownloadTarget
from trail_export.providers.fonts import PillowTextMeasurer
from trail_export.providers.map_canvas import MapCanvas, MapSource

# ---------------------------------------------------------------------------
# Sample geometries
# ---------------------------------------------------------------------------

TRAIL_POSITIONS = [
    [19.9561, 49.2325, 1010.0],
    [19.9603, 49.2291, 1105.5],
    [19.9658, 49.2257, 1240.0],
    [19.9812, 49.2318, 1502.25],
]


@pytest.fixture()
def line_string() -> dict[str, Any]:
    """Bare LineString through the Tatra foothills (with elevations)."""
    return {"type": "LineString", "coordinates": copy.deepcopy(TRAIL_POSITIONS)}


@pytest.fixture()
def trail_feature(line_string: dict[str, Any]) -> dict[str, Any]:
    """Feature wrapping ``line_string``."""
    return {
        "type": "Feature",
        "properties": {"id": "trail-7", "name": "Dolina"},
        "geometry": line_string,
    }


@pytest.fixture()
def multi_line_string() -> dict[str, Any]:
    """Two non-touching segments."""
    return {
        "type": "MultiLineString",
        "coordinates": [
            [[20.0, 49.0], [20.1, 49.1]],
            [[20.5, 49.5], [20.6, 49.6], [20.7, 49.7]],
        ],
    }


@pytest.fixture()
def trail_coords() -> list[Coordinate]:
    return [Coordinate.from_position(p) for p in TRAIL_POSITIONS]


@pytest.fixture()
def user_location() -> UserLocation:
    """A fix in Kraków."""
    return UserLocation(latitude=50.0614, longitude=19.9366, accuracy=25.0, captured_at=1000.0)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeMeasurer(PillowTextMeasurer):
    """Fixed-width text metrics: every character is ``size / 2`` pixels wide.

    Drawing still uses Pillow's default font through ``font()``.
    """

    def text_width(self, text: str, size: float) -> float:
        return len(text) * size / 2


class RecordingDownload(DownloadTarget):
    """Keeps delivered files in memory."""

    def __init__(self) -> None:
        self.files: dict[str, tuple[bytes, str]] = {}
        self.fail_with: Exception | None = None

    def deliver(self, content: bytes, filename: str, mime_type: str) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.files[filename] = (content, mime_type)
        return f"memory://{filename}"

    def text(self, filename: str) -> str:
        return self.files[filename][0].decode("utf-8")


class FakeSource(MapSource):
    def __init__(self, owner: FakeMap, data: dict[str, Any] | None) -> None:
        self._owner = owner
        self.data = data

    def get_data(self) -> dict[str, Any] | None:
        self._owner.check("get_data")
        return copy.deepcopy(self.data)

    def set_data(self, data: dict[str, Any]) -> None:
        self._owner.check("set_data")
        self.data = copy.deepcopy(data)


class FakeMap(MapCanvas):
    """In-memory map with one-shot failure injection.

    ``fail_once("fit_bounds")`` makes the next ``fit_bounds`` call raise
    ``RuntimeError``; later calls succeed again.
    """

    def __init__(self, *, size: tuple[int, int] = (800, 600), pixel_ratio: float = 1.0) -> None:
        self._size = size
        self._pixel_ratio = pixel_ratio
        self.viewport = Viewport(center=(19.95, 49.25), zoom=11.5, pitch=45.0, bearing=-17.0)
        self.layers = {*ROUTE_LINE_LAYERS, *ROUTE_CASING_LAYERS, *TRANSIENT_OVERLAY_LAYERS}
        self.paint: dict[tuple[str, str], Any] = {
            (ROUTE_LINE_LAYERS[0], "line-width"): [
                "interpolate", ["linear"], ["zoom"], 8, 1.5, 14, 4,
            ],
            (ROUTE_CASING_LAYERS[0], "line-width"): 5,
        }
        self.layout: dict[tuple[str, str], Any] = {
            (layer, "visibility"): "visible" for layer in TRANSIENT_OVERLAY_LAYERS
        }
        self.sources: dict[str, FakeSource] = {
            ALL_ROUTES_SOURCE_ID: FakeSource(
                self,
                {
                    "type": "FeatureCollection",
                    "features": [
                        {"type": "Feature", "properties": {"id": "trail-7"}, "geometry": None},
                        {"type": "Feature", "properties": {"id": "trail-8"}, "geometry": None},
                    ],
                },
            )
        }
        self.fitted: tuple[tuple[float, float, float, float], int] | None = None
        self.idle_waits = 0
        self.rasterized_under: dict[str, Any] | None = None
        self._failures: set[str] = set()

    # -- failure injection ----------------------------------------------

    def fail_once(self, operation: str) -> None:
        self._failures.add(operation)

    def check(self, operation: str) -> None:
        if operation in self._failures:
            self._failures.discard(operation)
            msg = f"{operation} failed"
            raise RuntimeError(msg)

    def snapshot(self) -> tuple[Any, ...]:
        """Everything the composer may touch, for before/after comparison."""
        return (
            self.viewport,
            copy.deepcopy(self.paint),
            copy.deepcopy(self.layout),
            {sid: copy.deepcopy(src.data) for sid, src in self.sources.items()},
        )

    # -- MapCanvas ------------------------------------------------------

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self._size

    @property
    def pixel_ratio(self) -> float:
        return self._pixel_ratio

    def get_viewport(self) -> Viewport:
        self.check("get_viewport")
        return self.viewport

    def set_viewport(self, viewport: Viewport) -> None:
        self.check("set_viewport")
        self.viewport = viewport

    def has_layer(self, layer_id: str) -> bool:
        return layer_id in self.layers

    def get_paint_property(self, layer_id: str, name: str) -> Any:
        return copy.deepcopy(self.paint.get((layer_id, name)))

    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        self.check("set_paint_property")
        self.paint[(layer_id, name)] = copy.deepcopy(value)

    def get_layout_property(self, layer_id: str, name: str) -> Any:
        return self.layout.get((layer_id, name))

    def set_layout_property(self, layer_id: str, name: str, value: Any) -> None:
        self.check("set_layout_property")
        self.layout[(layer_id, name)] = value

    def get_source(self, source_id: str) -> MapSource | None:
        return self.sources.get(source_id)

    def fit_bounds(self, bbox: tuple[float, float, float, float], padding_px: int) -> None:
        self.check("fit_bounds")
        self.fitted = (bbox, padding_px)
        min_lon, min_lat, max_lon, max_lat = bbox
        center = ((min_lon + max_lon) / 2, (min_lat + max_lat) / 2)
        self.viewport = Viewport(center=center, zoom=13.0)

    async def once_idle(self) -> None:
        self.idle_waits += 1
        self.check("once_idle")

    def rasterize_canvas(self) -> np.ndarray:
        self.check("rasterize_canvas")
        source = self.sources.get(ALL_ROUTES_SOURCE_ID)
        self.rasterized_under = {
            "viewport": self.viewport,
            "paint": copy.deepcopy(self.paint),
            "layout": copy.deepcopy(self.layout),
            "routes": copy.deepcopy(source.data) if source is not None else None,
        }
        width, height = self._size
        ratio = self._pixel_ratio
        return np.full((round(height * ratio), round(width * ratio), 3), 180, dtype=np.uint8)


@pytest.fixture()
def measurer() -> FakeMeasurer:
    return FakeMeasurer()


@pytest.fixture()
def fake_map() -> FakeMap:
    return FakeMap()


@pytest.fixture()
def download() -> RecordingDownload:
    return RecordingDownload()


@pytest.fixture()
def make_map() -> type[FakeMap]:
    """The ``FakeMap`` class, for tests that need a custom size or ratio."""
    return FakeMap

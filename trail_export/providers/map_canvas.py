"""Map canvas capability.

The snapshot pipeline drives a live, interactive map (a vector-tile
renderer in a browser or a headless renderer) exclusively through this
interface.  Adapters translate each call to the engine's own API.

Contract notes:
- Paint and layout properties are read and written verbatim; values
  may be scalars or style expressions (lists) and are restored as-is.
- ``rasterize_canvas`` returns the canvas at its native pixel ratio as
  a ``uint8`` array of shape ``(height, width, 3|4)``.
- ``once_idle`` resolves once the map has finished loading and
  rendering after the most recent change.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import numpy as np

    from trail_export.models.snapshot import Viewport


class MapSource(abc.ABC):
    """A GeoJSON data source registered on the map."""

    @abc.abstractmethod
    def get_data(self) -> dict[str, Any] | None:
        """Return the current feature collection, ``None`` if unreadable."""

    @abc.abstractmethod
    def set_data(self, data: dict[str, Any]) -> None:
        """Replace the source contents with ``data``."""


class MapCanvas(abc.ABC):
    """Narrow view of a map rendering engine."""

    @property
    @abc.abstractmethod
    def canvas_size(self) -> tuple[int, int]:
        """Canvas ``(width, height)`` in CSS pixels."""

    @property
    @abc.abstractmethod
    def pixel_ratio(self) -> float:
        """Device pixels per CSS pixel."""

    @abc.abstractmethod
    def get_viewport(self) -> Viewport:
        """Return the current camera."""

    @abc.abstractmethod
    def set_viewport(self, viewport: Viewport) -> None:
        """Jump (without animation) to ``viewport``."""

    @abc.abstractmethod
    def has_layer(self, layer_id: str) -> bool:
        """Whether the style contains ``layer_id``."""

    @abc.abstractmethod
    def get_paint_property(self, layer_id: str, name: str) -> Any:
        """Return a paint property value."""

    @abc.abstractmethod
    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None:
        """Set a paint property value."""

    @abc.abstractmethod
    def get_layout_property(self, layer_id: str, name: str) -> Any:
        """Return a layout property value."""

    @abc.abstractmethod
    def set_layout_property(self, layer_id: str, name: str, value: Any) -> None:
        """Set a layout property value."""

    @abc.abstractmethod
    def get_source(self, source_id: str) -> MapSource | None:
        """Return a data source, ``None`` if the style has none by that id."""

    @abc.abstractmethod
    def fit_bounds(self, bbox: tuple[float, float, float, float], padding_px: int) -> None:
        """Fit the camera to ``(min_lon, min_lat, max_lon, max_lat)``."""

    @abc.abstractmethod
    async def once_idle(self) -> None:
        """Wait until the map has finished loading and rendering."""

    @abc.abstractmethod
    def rasterize_canvas(self) -> np.ndarray:
        """Return the rendered canvas as an RGB(A) ``uint8`` array."""

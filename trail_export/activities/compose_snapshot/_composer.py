"""Snapshot composer: the save / mutate / rasterise / restore bracket.

One ``compose`` call walks the map through::

    IDLE -> CAPTURING -> ISOLATED -> STYLED -> FITTED -> RASTERIZED
         -> ANNOTATED -> DOWNLOADED -> RESTORING -> IDLE

Restoration runs in ``finally``, so a failure at any step after the
capture still puts the viewport, paint properties, overlay visibility
and the shared routes source back.  Exports are serialised with an
``asyncio.Lock`` because they all mutate the same live map.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from trail_export.activities.compose_snapshot._annotate import draw_card, encode_png
from trail_export.activities.compose_snapshot._layout import format_length, layout_card
from trail_export.activities.compose_snapshot._state import (
    HIDDEN,
    LINE_WIDTH,
    VISIBILITY,
    SnapshotLayers,
    capture_state,
    restore_state,
)
from trail_export.activities.extract_geometry import route_bounds, route_length_km
from trail_export.core.constants import PNG_EXTENSION, PNG_MIME_TYPE
from trail_export.core.exceptions import (
    ExportError,
    InvalidGeometryError,
    MapCapabilityMissingError,
    RenderingStepFailedError,
)
from trail_export.models.snapshot import SnapshotStage, SnapshotState, Viewport
from trail_export.providers.fonts import PillowTextMeasurer
from trail_export.utils.slug import build_filename

if TYPE_CHECKING:
    from PIL import Image

    from trail_export.models.geometry import Coordinate
    from trail_export.providers.download import DownloadTarget
    from trail_export.providers.map_canvas import MapCanvas

logger = logging.getLogger("trail_export.activities.compose_snapshot")

DEFAULT_PADDING_RATIO = 0.08
DEFAULT_IDLE_TIMEOUT_S = 15.0


@dataclass(frozen=True, slots=True)
class SnapshotResult:
    """A delivered snapshot.

    Attributes:
        filename: Download filename (``<slug>.png``).
        location: Where the download target put the file.
        size: Raster ``(width, height)`` in pixels.
        length_km: Route length printed on the card.
        restoration_failures: Items that could not be restored.
    """

    filename: str
    location: str
    size: tuple[int, int]
    length_km: float
    restoration_failures: tuple[str, ...] = ()


class SnapshotComposer:
    """Produces an annotated PNG of one route on the live map.

    Args:
        canvas: The map capability; ``None`` when no map is available,
            in which case every ``compose`` call fails fast.
        download: Receives the PNG bytes.
        measurer: Font metrics and fonts for the card.
        layers: Layer and source ids the snapshot touches.
        padding_ratio: Fit padding as a fraction of the smaller canvas side.
        idle_timeout_s: Upper bound for each wait on the idle signal.
        fallback_routes: Collection reloaded into the shared source when
            its original contents could not be captured.
    """

    def __init__(
        self,
        canvas: MapCanvas | None,
        download: DownloadTarget,
        *,
        measurer: PillowTextMeasurer | None = None,
        layers: SnapshotLayers | None = None,
        padding_ratio: float = DEFAULT_PADDING_RATIO,
        idle_timeout_s: float = DEFAULT_IDLE_TIMEOUT_S,
        fallback_routes: Mapping[str, Any] | None = None,
    ) -> None:
        self._canvas = canvas
        self._download = download
        self._measurer = measurer or PillowTextMeasurer()
        self._layers = layers or SnapshotLayers()
        self._padding_ratio = padding_ratio
        self._idle_timeout_s = idle_timeout_s
        self._fallback_routes = fallback_routes
        self._lock = asyncio.Lock()
        self._stage = SnapshotStage.IDLE

    @property
    def available(self) -> bool:
        return self._canvas is not None

    @property
    def stage(self) -> SnapshotStage:
        return self._stage

    async def compose(
        self,
        coords: Sequence[Coordinate],
        name: str,
        *,
        swatch_color: str = "#FF0000",
        target_feature: Mapping[str, Any] | None = None,
    ) -> SnapshotResult:
        """Render, annotate and deliver a snapshot of ``coords``.

        Args:
            coords: Full route, used for the fit and the length.
            name: Route name (card title and filename).
            swatch_color: Route display color for the card swatch.
            target_feature: Feature placed alone in the shared source;
                built from ``coords`` when omitted.

        Raises:
            MapCapabilityMissingError: No map canvas is attached.
            InvalidGeometryError: ``coords`` is empty.
            RenderingStepFailedError: A step between isolation and
                download failed (after the map was restored).
            DownloadFailedError: The download target rejected the file.
        """
        canvas = self._canvas
        if canvas is None:
            msg = "PNG export requires a map canvas"
            raise MapCapabilityMissingError(msg)
        if not coords:
            msg = f"Route {name!r} has no coordinates to render"
            raise InvalidGeometryError(msg)

        async with self._lock:
            return await self._compose_locked(
                canvas,
                coords,
                name,
                swatch_color,
                target_feature or _route_feature(coords, name),
            )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _compose_locked(
        self,
        canvas: MapCanvas,
        coords: Sequence[Coordinate],
        name: str,
        swatch_color: str,
        feature: Mapping[str, Any],
    ) -> SnapshotResult:
        logger.info("Snapshot started | name=%s | points=%d", name, len(coords))
        self._stage = SnapshotStage.CAPTURING
        try:
            state = capture_state(canvas, self._layers)
        except Exception as exc:
            self._stage = SnapshotStage.IDLE
            raise RenderingStepFailedError("capture", f"Cannot read map state: {exc}") from exc

        step = "isolate"
        try:
            await self._isolate(canvas, state, feature)
            self._stage = SnapshotStage.ISOLATED

            step = "hide"
            for layer in state.visibility:
                canvas.set_layout_property(layer, VISIBILITY, HIDDEN)

            step = "style"
            for layer, _name in state.paint:
                canvas.set_paint_property(layer, LINE_WIDTH, self._layers.export_widths[layer])
            self._stage = SnapshotStage.STYLED

            step = "fit"
            await self._fit(canvas, coords)
            self._stage = SnapshotStage.FITTED

            step = "rasterize"
            image = _to_image(canvas.rasterize_canvas())
            self._stage = SnapshotStage.RASTERIZED

            step = "annotate"
            length_km = route_length_km(coords)
            layout = layout_card(
                name,
                format_length(length_km),
                image.size,
                self._measurer,
                scale=canvas.pixel_ratio,
            )
            image = draw_card(image, layout, swatch_color, self._measurer)
            self._stage = SnapshotStage.ANNOTATED

            step = "download"
            filename = build_filename(name, PNG_EXTENSION)
            location = self._download.deliver(encode_png(image), filename, PNG_MIME_TYPE)
            self._stage = SnapshotStage.DOWNLOADED
        except ExportError:
            logger.error("Snapshot failed | name=%s | step=%s", name, step)
            raise
        except TimeoutError as exc:
            logger.error("Snapshot failed | name=%s | step=%s | idle timeout", name, step)
            msg = f"Map did not become idle within {self._idle_timeout_s:g}s"
            raise RenderingStepFailedError(step, msg) from exc
        except Exception as exc:
            logger.error("Snapshot failed | name=%s | step=%s | error=%s", name, step, exc)
            raise RenderingStepFailedError(step, str(exc)) from exc
        finally:
            self._stage = SnapshotStage.RESTORING
            failures = restore_state(canvas, state, self._layers, self._fallback_routes)
            self._stage = SnapshotStage.IDLE

        logger.info(
            "Snapshot delivered | name=%s | file=%s | size=%dx%d",
            name,
            filename,
            image.size[0],
            image.size[1],
        )
        return SnapshotResult(
            filename=filename,
            location=location,
            size=image.size,
            length_km=length_km,
            restoration_failures=tuple(f.message for f in failures),
        )

    async def _isolate(
        self,
        canvas: MapCanvas,
        state: SnapshotState,
        feature: Mapping[str, Any],
    ) -> None:
        source = canvas.get_source(self._layers.source_id)
        if source is None:
            logger.debug("No shared routes source | id=%s", self._layers.source_id)
            return
        original = source.get_data()
        state.source_data = copy.deepcopy(original) if original is not None else None
        state.source_isolated = True
        source.set_data({"type": "FeatureCollection", "features": [dict(feature)]})
        await self._wait_idle(canvas)

    async def _fit(self, canvas: MapCanvas, coords: Sequence[Coordinate]) -> None:
        current = canvas.get_viewport()
        canvas.set_viewport(Viewport(center=current.center, zoom=current.zoom))
        width, height = canvas.canvas_size
        padding = round(min(width, height) * self._padding_ratio)
        canvas.fit_bounds(route_bounds(coords), padding)
        await self._wait_idle(canvas)

    async def _wait_idle(self, canvas: MapCanvas) -> None:
        await asyncio.wait_for(canvas.once_idle(), timeout=self._idle_timeout_s)


def _route_feature(coords: Sequence[Coordinate], name: str) -> dict[str, Any]:
    return {
        "type": "Feature",
        "properties": {"name": name},
        "geometry": {
            "type": "LineString",
            "coordinates": [c.to_position() for c in coords],
        },
    }


def _to_image(pixels: Any) -> Image.Image:
    import numpy as np
    from PIL import Image

    array = np.asarray(pixels, dtype=np.uint8)
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        msg = f"Expected an (height, width, 3|4) raster, got shape {array.shape}"
        raise ValueError(msg)
    return Image.fromarray(array).convert("RGBA")

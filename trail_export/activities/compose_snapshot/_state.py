"""Capture and restoration of live map state around a snapshot.

``capture_state`` records the camera, the widened paint properties and
the overlay visibilities *before* anything is changed.  The isolated
data source is recorded by the isolate step itself, just before it is
replaced.  ``restore_state`` writes every recorded value back.

Restoration is best-effort per item: a failure restoring one item is
logged as ``RestorationFailedError`` and the remaining items are still
restored.  It never raises, so it cannot mask the export's own result.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from trail_export.core.constants import (
    ALL_ROUTES_SOURCE_ID,
    EXPORT_CASING_WIDTH,
    EXPORT_LINE_WIDTH,
    ROUTE_CASING_LAYERS,
    ROUTE_LINE_LAYERS,
    TRANSIENT_OVERLAY_LAYERS,
)
from trail_export.core.exceptions import RestorationFailedError
from trail_export.models.snapshot import SnapshotState

if TYPE_CHECKING:
    from trail_export.providers.map_canvas import MapCanvas

logger = logging.getLogger("trail_export.activities.compose_snapshot")

LINE_WIDTH = "line-width"
VISIBILITY = "visibility"
HIDDEN = "none"


@dataclass(frozen=True, slots=True)
class SnapshotLayers:
    """Which parts of the map style the snapshot touches.

    Attributes:
        source_id: Shared source holding every route.
        line_layers: Route fill layers widened to ``line_width``.
        casing_layers: Route casing layers widened to ``casing_width``.
        transient_layers: Overlays hidden during rasterisation.
        line_width: Export width of the route line.
        casing_width: Export width of the route casing.
    """

    source_id: str = ALL_ROUTES_SOURCE_ID
    line_layers: tuple[str, ...] = ROUTE_LINE_LAYERS
    casing_layers: tuple[str, ...] = ROUTE_CASING_LAYERS
    transient_layers: tuple[str, ...] = TRANSIENT_OVERLAY_LAYERS
    line_width: float = EXPORT_LINE_WIDTH
    casing_width: float = EXPORT_CASING_WIDTH
    export_widths: dict[str, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        widths = {layer: self.casing_width for layer in self.casing_layers}
        widths.update({layer: self.line_width for layer in self.line_layers})
        object.__setattr__(self, "export_widths", widths)


def capture_state(canvas: MapCanvas, layers: SnapshotLayers) -> SnapshotState:
    """Record the camera, line widths and overlay visibility.

    Layers missing from the current style are skipped.
    """
    state = SnapshotState(viewport=canvas.get_viewport())
    for layer in layers.export_widths:
        if canvas.has_layer(layer):
            state.paint[(layer, LINE_WIDTH)] = canvas.get_paint_property(layer, LINE_WIDTH)
    for layer in layers.transient_layers:
        if canvas.has_layer(layer):
            state.visibility[layer] = canvas.get_layout_property(layer, VISIBILITY)
    logger.debug(
        "Map state captured | paint=%d | overlays=%d",
        len(state.paint),
        len(state.visibility),
    )
    return state


def restore_state(
    canvas: MapCanvas,
    state: SnapshotState,
    layers: SnapshotLayers,
    fallback_routes: Mapping[str, Any] | None = None,
) -> list[RestorationFailedError]:
    """Write every captured value back into the map.

    Args:
        canvas: The live map.
        state: Values captured before the export.
        layers: Layer configuration (for the source id).
        fallback_routes: Feature collection to reload into the shared
            source when its original contents were not captured.

    Returns:
        The restoration failures (already logged); empty when every
        item was restored.
    """
    failures: list[RestorationFailedError] = []

    def attempt(item: str, action: Any, *args: Any) -> None:
        try:
            action(*args)
        except Exception as exc:
            failure = RestorationFailedError(f"Could not restore {item}: {exc}")
            logger.warning("Restoration failed | item=%s | error=%s", item, exc)
            failures.append(failure)

    for layer, value in state.visibility.items():
        attempt(f"visibility of {layer}", canvas.set_layout_property, layer, VISIBILITY, value)

    for (layer, name), value in state.paint.items():
        attempt(f"{name} of {layer}", canvas.set_paint_property, layer, name, value)

    if state.source_isolated:
        data = state.source_data if state.source_data is not None else fallback_routes
        if data is None:
            failure = RestorationFailedError(
                f"No original or fallback data to restore source {layers.source_id!r}"
            )
            logger.warning("Restoration failed | item=source %s | no data", layers.source_id)
            failures.append(failure)
        else:
            attempt(f"source {layers.source_id}", _reload_source, canvas, layers.source_id, data)

    if state.viewport is not None:
        attempt("viewport", canvas.set_viewport, state.viewport)

    logger.info("Map state restored | failures=%d", len(failures))
    return failures


def _reload_source(canvas: MapCanvas, source_id: str, data: Mapping[str, Any]) -> None:
    source = canvas.get_source(source_id)
    if source is None:
        msg = f"source {source_id!r} no longer exists"
        raise LookupError(msg)
    source.set_data(dict(data))

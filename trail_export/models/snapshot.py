"""Map state captured around a PNG snapshot.

``SnapshotState`` is created at the start of a PNG export and written
back into the live map at the end of the same export.  It is the only
record of what the snapshot pipeline changed, so every mutation is
registered here *before* it is applied.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class SnapshotStage(enum.Enum):
    """Progress of a snapshot export."""

    IDLE = "idle"
    CAPTURING = "capturing"
    ISOLATED = "isolated"
    STYLED = "styled"
    FITTED = "fitted"
    RASTERIZED = "rasterized"
    ANNOTATED = "annotated"
    DOWNLOADED = "downloaded"
    RESTORING = "restoring"


@dataclass(frozen=True, slots=True)
class Viewport:
    """Camera position of the map.

    Attributes:
        center: ``(lon, lat)`` of the view centre.
        zoom: Zoom level.
        pitch: Tilt in degrees (0 = looking straight down).
        bearing: Rotation in degrees (0 = north up).
    """

    center: tuple[float, float]
    zoom: float
    pitch: float = 0.0
    bearing: float = 0.0


@dataclass(slots=True)
class SnapshotState:
    """Pre-export values of everything the snapshot pipeline touches.

    Attributes:
        viewport: Camera before the export.
        paint: ``(layer, property) -> value`` for the widened line layers.
        visibility: ``layer -> visibility`` for hidden overlay layers.
        source_data: Original feature collection of the shared routes
            source, ``None`` when it could not be read.
        source_isolated: Whether the shared source was replaced.
    """

    viewport: Viewport | None = None
    paint: dict[tuple[str, str], Any] = field(default_factory=dict)
    visibility: dict[str, Any] = field(default_factory=dict)
    source_data: dict[str, Any] | None = None
    source_isolated: bool = False

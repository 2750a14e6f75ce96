"""Annotated PNG snapshot of a route on the live map.

Public API:
    SnapshotComposer: Runs the capture / isolate / style / fit /
        rasterise / annotate / download bracket with guaranteed restore.
    layout_card, wrap_title: Pure card layout (testable without a map).
"""

from __future__ import annotations

from trail_export.activities.compose_snapshot._annotate import draw_card, encode_png, hex_to_rgba
from trail_export.activities.compose_snapshot._composer import SnapshotComposer, SnapshotResult
from trail_export.activities.compose_snapshot._layout import (
    CardLayout,
    format_length,
    layout_card,
    max_card_width,
    wrap_title,
)
from trail_export.activities.compose_snapshot._state import (
    SnapshotLayers,
    capture_state,
    restore_state,
)

__all__ = [
    "CardLayout",
    "SnapshotComposer",
    "SnapshotLayers",
    "SnapshotResult",
    "capture_state",
    "draw_card",
    "encode_png",
    "format_length",
    "hex_to_rgba",
    "layout_card",
    "max_card_width",
    "restore_state",
    "wrap_title",
]

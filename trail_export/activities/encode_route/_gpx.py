"""GPX 1.1 track encoder.

One ``<trk>`` with one ``<trkseg>``; one ``<trkpt>`` per coordinate in
route order.  Elevation is written as ``0`` when the source geometry
had none.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from trail_export.activities.encode_route._escape import escape_xml, format_number
from trail_export.core.constants import GPX_CREATOR, GPX_NAMESPACE
from trail_export.models.geometry import Coordinate, validate_route_coordinates

logger = logging.getLogger("trail_export.activities.encode_route")

DEFAULT_TRACK_DESCRIPTION = "Exported trail route"


def encode_gpx(
    coords: Sequence[Coordinate],
    name: str,
    track_description: str = DEFAULT_TRACK_DESCRIPTION,
) -> str:
    """Encode a GPX track document.

    Args:
        coords: Trail coordinates in route order (non-empty).
        name: Track name.
        track_description: Track ``<desc>`` text.

    Returns:
        The GPX document text.

    Raises:
        InvalidGeometryError: If ``coords`` is empty.
        InvalidCoordinateError: If any coordinate is out of range.
    """
    validate_route_coordinates(coords, f"GPX track '{name}'")

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<gpx version="1.1" creator="{escape_xml(GPX_CREATOR)}" xmlns="{GPX_NAMESPACE}">',
        "  <trk>",
        f"    <name>{escape_xml(name)}</name>",
        f"    <desc>{escape_xml(track_description)}</desc>",
        "    <trkseg>",
    ]
    for coord in coords:
        lines += [
            f'      <trkpt lat="{format_number(coord.lat)}" lon="{format_number(coord.lon)}">',
            f"        <ele>{format_number(coord.elevation)}</ele>",
            "      </trkpt>",
        ]
    lines += [
        "    </trkseg>",
        "  </trk>",
        "</gpx>",
        "",
    ]

    logger.debug("GPX encoded | name=%s | points=%d", name, len(coords))
    return "\n".join(lines)

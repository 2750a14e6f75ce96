"""KML 2.2 document encoders.

Three document shapes are produced:

- ``encode_kml``: one styled line for the trail, optionally preceded
  by a start-marker point.
- ``encode_multi_stage_kml``: drive-then-walk journey with five
  placemarks (user location, trailhead, trail end, driving line,
  walking line) and one named style per role.
- ``encode_drive_only_kml``: user location → trailhead only.

The driving line is a straight segment between two points.  It is not
a road route; its description says so and tells the user to navigate
with a real routing service.

All free text goes through ``escape_xml``.  Output is deterministic:
the same arguments always produce the same document.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from trail_export.activities.encode_route._escape import escape_xml, format_number
from trail_export.activities.encode_route._styles import kml_color
from trail_export.core.constants import KML_NAMESPACE
from trail_export.core.exceptions import InvalidCoordinateError
from trail_export.models.geometry import (
    Coordinate,
    validate_route_coordinates,
    validate_wgs84_coordinate,
)
from trail_export.models.request import StyleOptions

if TYPE_CHECKING:
    from trail_export.models.location import UserLocation

logger = logging.getLogger("trail_export.activities.encode_route")

DOCUMENT_DESCRIPTION = "Route exported from the interactive trail map"
TRAIL_DESCRIPTION = "Main hiking trail"

TRAIL_STYLE_ID = "trailStyle"
DRIVING_STYLE_ID = "drivingStyle"
WALKING_STYLE_ID = "walkingStyle"
START_POINT_STYLE_ID = "startPoint"
TRAILHEAD_STYLE_ID = "trailStartPoint"
END_POINT_STYLE_ID = "endPoint"

_PUSHPIN_BASE = "http://maps.google.com/mapfiles/kml/pushpin"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def encode_kml(
    coords: Sequence[Coordinate],
    name: str,
    style: StyleOptions | None = None,
    start_marker: Coordinate | None = None,
) -> str:
    """Encode a single-track KML document.

    Args:
        coords: Trail coordinates in route order (non-empty).
        name: Route display name.
        style: Line color/width; ``StyleOptions()`` defaults when ``None``.
        start_marker: Optional point placed before the trail placemark
            (typically the user's location).

    Returns:
        The KML document text.

    Raises:
        InvalidGeometryError: If ``coords`` is empty.
        InvalidCoordinateError: If any coordinate or the marker is out of range.
    """
    style = style or StyleOptions()
    validate_route_coordinates(coords, f"KML route '{name}'")
    if start_marker is not None:
        validate_wgs84_coordinate(start_marker, f"start marker of '{name}'")

    lines = _document_open(name, DOCUMENT_DESCRIPTION)
    lines += _line_style(TRAIL_STYLE_ID, style.line_color, style.line_width)

    if start_marker is not None:
        lines += _point_placemark(
            "Start point (your location)",
            "User location",
            start_marker,
        )

    lines += [
        "    <Placemark>",
        f"      <name>{escape_xml(name)}</name>",
        f"      <description>{escape_xml(TRAIL_DESCRIPTION)}</description>",
        f"      <styleUrl>#{TRAIL_STYLE_ID}</styleUrl>",
        "      <LineString>",
        "        <tessellate>1</tessellate>",
        f"        <coordinates>{' '.join(_kml_position(c) for c in coords)}</coordinates>",
        "      </LineString>",
        "    </Placemark>",
    ]
    lines += _document_close()

    logger.debug(
        "KML encoded | name=%s | points=%d | start_marker=%s",
        name,
        len(coords),
        start_marker is not None,
    )
    return "\n".join(lines)


def encode_multi_stage_kml(
    coords: Sequence[Coordinate],
    name: str,
    user_location: UserLocation,
    style: StyleOptions | None = None,
) -> str:
    """Encode a drive-then-walk KML journey.

    Placemarks, in order: user location, trailhead, trail end, the
    illustrative driving line (user → trailhead) and the tessellated
    walking line for the whole trail.

    Raises:
        InvalidGeometryError: If ``coords`` is empty.
        InvalidCoordinateError: If ``user_location`` or any coordinate
            is out of range.
    """
    style = style or StyleOptions()
    validate_route_coordinates(coords, f"KML route '{name}'")
    origin = _location_coordinate(user_location, name)
    trail_start = coords[0]
    trail_end = coords[-1]

    lines = _document_open(
        f"{name} - Full journey",
        "Multi-stage route: drive to the trailhead, then walk the trail",
    )
    lines += _line_style(DRIVING_STYLE_ID, style.driving_color, style.driving_width)
    lines += _line_style(WALKING_STYLE_ID, style.walking_color, style.walking_width)
    lines += _icon_style(START_POINT_STYLE_ID, "#00FF00", 1.2, "grn-pushpin.png")
    lines += _icon_style(TRAILHEAD_STYLE_ID, "#FF0000", 1.1, "blue-pushpin.png")
    lines += _icon_style(END_POINT_STYLE_ID, "#0000FF", 1.2, "red-pushpin.png")

    lines += _point_placemark(
        "Start - Your location",
        "Journey start (drive from here)",
        origin,
        style_id=START_POINT_STYLE_ID,
    )
    lines += _point_placemark(
        f'Parking - Start of trail "{name}"',
        "Leave the car here and continue on foot",
        trail_start,
        style_id=TRAILHEAD_STYLE_ID,
    )
    lines += _point_placemark(
        f'Finish - End of trail "{name}"',
        "End of the walking route",
        trail_end,
        style_id=END_POINT_STYLE_ID,
    )
    lines += _driving_placemark(origin, trail_start)
    lines += _line_placemark(
        f"Walking trail - {name}",
        "Walking route",
        coords,
        style_id=WALKING_STYLE_ID,
    )
    lines += _document_close()

    logger.debug("Multi-stage KML encoded | name=%s | points=%d", name, len(coords))
    return "\n".join(lines)


def encode_drive_only_kml(
    coords: Sequence[Coordinate],
    name: str,
    user_location: UserLocation,
    style: StyleOptions | None = None,
) -> str:
    """Encode a "get me to the trailhead" KML (user location → trail start).

    Raises:
        InvalidGeometryError: If ``coords`` is empty.
        InvalidCoordinateError: If ``user_location`` or the trailhead is
            out of range.
    """
    style = style or StyleOptions()
    validate_route_coordinates(coords, f"KML route '{name}'")
    origin = _location_coordinate(user_location, name)
    trail_start = coords[0]

    lines = _document_open(
        f"{name} - Drive to trailhead",
        "Drive from your location to the start of the trail",
    )
    lines += _line_style(DRIVING_STYLE_ID, style.driving_color, style.driving_width)
    lines += _icon_style(START_POINT_STYLE_ID, "#00FF00", 1.2, "grn-pushpin.png")
    lines += _icon_style(TRAILHEAD_STYLE_ID, "#FF0000", 1.1, "blue-pushpin.png")

    lines += _point_placemark(
        "Start - Your location",
        "Journey start (drive from here)",
        origin,
        style_id=START_POINT_STYLE_ID,
    )
    lines += _point_placemark(
        f'Parking - Start of trail "{name}"',
        "Destination of the drive",
        trail_start,
        style_id=TRAILHEAD_STYLE_ID,
    )
    lines += _driving_placemark(origin, trail_start)
    lines += _document_close()

    logger.debug("Drive-only KML encoded | name=%s", name)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _location_coordinate(user_location: UserLocation, name: str) -> Coordinate:
    if not user_location.is_valid():
        msg = (
            f"User location ({user_location.latitude}, {user_location.longitude}) "
            f"is out of range for route '{name}'"
        )
        raise InvalidCoordinateError(msg)
    return user_location.to_coordinate()


def _kml_position(coord: Coordinate) -> str:
    return (
        f"{format_number(coord.lon)},{format_number(coord.lat)},"
        f"{format_number(coord.elevation)}"
    )


def _document_open(name: str, description: str) -> list[str]:
    return [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<kml xmlns="{KML_NAMESPACE}">',
        "  <Document>",
        f"    <name>{escape_xml(name)}</name>",
        f"    <description>{escape_xml(description)}</description>",
    ]


def _document_close() -> list[str]:
    return ["  </Document>", "</kml>", ""]


def _line_style(style_id: str, hex_color: str, width: float) -> list[str]:
    return [
        f'    <Style id="{style_id}">',
        "      <LineStyle>",
        f"        <color>{kml_color(hex_color)}</color>",
        f"        <width>{format_number(width)}</width>",
        "      </LineStyle>",
        "    </Style>",
    ]


def _icon_style(style_id: str, hex_color: str, scale: float, icon: str) -> list[str]:
    return [
        f'    <Style id="{style_id}">',
        "      <IconStyle>",
        f"        <color>{kml_color(hex_color)}</color>",
        f"        <scale>{format_number(scale)}</scale>",
        "        <Icon>",
        f"          <href>{_PUSHPIN_BASE}/{icon}</href>",
        "        </Icon>",
        "      </IconStyle>",
        "    </Style>",
    ]


def _point_placemark(
    label: str,
    description: str,
    coord: Coordinate,
    *,
    style_id: str = "",
) -> list[str]:
    lines = [
        "    <Placemark>",
        f"      <name>{escape_xml(label)}</name>",
        f"      <description>{escape_xml(description)}</description>",
    ]
    if style_id:
        lines.append(f"      <styleUrl>#{style_id}</styleUrl>")
    lines += [
        "      <Point>",
        f"        <coordinates>{_kml_position(coord)}</coordinates>",
        "      </Point>",
        "    </Placemark>",
    ]
    return lines


def _line_placemark(
    label: str,
    description: str,
    coords: Sequence[Coordinate],
    *,
    style_id: str,
    tessellate: bool = True,
) -> list[str]:
    lines = [
        "    <Placemark>",
        f"      <name>{escape_xml(label)}</name>",
        f"      <description>{escape_xml(description)}</description>",
        f"      <styleUrl>#{style_id}</styleUrl>",
        "      <LineString>",
    ]
    if tessellate:
        lines.append("        <tessellate>1</tessellate>")
    lines.append("        <coordinates>")
    lines += [f"          {_kml_position(c)}" for c in coords]
    lines += [
        "        </coordinates>",
        "      </LineString>",
        "    </Placemark>",
    ]
    return lines


def _driving_placemark(origin: Coordinate, trail_start: Coordinate) -> list[str]:
    return _line_placemark(
        "Drive by car",
        "Use car navigation to get from your location to the trailhead. "
        "This straight line is only a guide, not a road route.",
        [origin, trail_start],
        style_id=DRIVING_STYLE_ID,
        tessellate=False,
    )

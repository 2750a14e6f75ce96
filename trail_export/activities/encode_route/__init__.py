"""Route text encoding activity.

Pure, deterministic encoders that turn a coordinate sequence into
route files for third-party navigation tools:

- **_kml**: single-track, multi-stage (drive + walk) and drive-only KML 2.2
- **_gpx**: single-track GPX 1.1
- **_styles**: ``#RRGGBB`` → KML ``AABBGGRR`` color conversion
- **_escape**: XML escaping of free text, number formatting
- **_validation**: lxml well-formedness check before delivery
- **_reader**: lxml readers that pull coordinates back out of documents

Encoders never perform I/O.  Every free-text field (names,
descriptions, labels) is XML-escaped.
"""

from __future__ import annotations

from trail_export.activities.encode_route._escape import escape_xml, format_number
from trail_export.activities.encode_route._gpx import DEFAULT_TRACK_DESCRIPTION, encode_gpx
from trail_export.activities.encode_route._kml import (
    DRIVING_STYLE_ID,
    END_POINT_STYLE_ID,
    START_POINT_STYLE_ID,
    TRAIL_STYLE_ID,
    TRAILHEAD_STYLE_ID,
    WALKING_STYLE_ID,
    encode_drive_only_kml,
    encode_kml,
    encode_multi_stage_kml,
)
from trail_export.activities.encode_route._reader import (
    parse_coordinates_text,
    read_gpx_track_points,
    read_kml_lines,
    read_kml_points,
)
from trail_export.activities.encode_route._styles import kml_color
from trail_export.activities.encode_route._validation import ensure_well_formed

__all__ = [
    "DEFAULT_TRACK_DESCRIPTION",
    "DRIVING_STYLE_ID",
    "END_POINT_STYLE_ID",
    "START_POINT_STYLE_ID",
    "TRAILHEAD_STYLE_ID",
    "TRAIL_STYLE_ID",
    "WALKING_STYLE_ID",
    "encode_drive_only_kml",
    "encode_gpx",
    "encode_kml",
    "encode_multi_stage_kml",
    "ensure_well_formed",
    "escape_xml",
    "format_number",
    "kml_color",
    "parse_coordinates_text",
    "read_gpx_track_points",
    "read_kml_lines",
    "read_kml_points",
]

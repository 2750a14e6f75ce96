"""Shared export constants.

Centralises MIME types, file extensions, XML namespaces, KML style ids
and the default map layer ids touched by the snapshot pipeline.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------

KML_MIME_TYPE: str = "application/vnd.google-earth.kml+xml"
GPX_MIME_TYPE: str = "application/gpx+xml"
PNG_MIME_TYPE: str = "image/png"

KML_EXTENSION: str = ".kml"
GPX_EXTENSION: str = ".gpx"
PNG_EXTENSION: str = ".png"

DRIVING_FILENAME_SUFFIX: str = "_with_driving"
DRIVE_ONLY_FILENAME_SUFFIX: str = "_drive_to_trailhead"

# ---------------------------------------------------------------------------
# XML namespaces
# ---------------------------------------------------------------------------

KML_NAMESPACE: str = "http://www.opengis.net/kml/2.2"
GPX_NAMESPACE: str = "http://www.topografix.com/GPX/1/1"
GPX_CREATOR: str = "trail-export"

# ---------------------------------------------------------------------------
# WGS 84 bounds
# ---------------------------------------------------------------------------

MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0

# ---------------------------------------------------------------------------
# Slugs
# ---------------------------------------------------------------------------

SLUG_FALLBACK: str = "route"
"""Token used when a display name slugs to nothing."""

# ---------------------------------------------------------------------------
# Default map layer / source ids (snapshot pipeline)
# ---------------------------------------------------------------------------

ALL_ROUTES_SOURCE_ID: str = "all-routes"
"""Shared data source holding every route; isolated during PNG export."""

ROUTE_LINE_LAYERS: tuple[str, ...] = ("route-line",)
ROUTE_CASING_LAYERS: tuple[str, ...] = ("route-casing",)

TRANSIENT_OVERLAY_LAYERS: tuple[str, ...] = (
    "route-progress",
    "route-highlight-animated",
    "route-highlight-glow",
    "region-boundary",
    "region-boundary-label",
)
"""Overlays hidden while the snapshot is rasterised."""

EXPORT_LINE_WIDTH: float = 6.0
EXPORT_CASING_WIDTH: float = 10.0

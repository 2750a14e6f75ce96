"""Data models.

- geometry: ``Coordinate`` and route endpoints
- location: ``UserLocation`` fix
- navigation: travel modes, legs and directions links
- snapshot: map viewport and captured map state
- request: ``ExportRequest`` and ``StyleOptions``
- outcome: ``ExportOutcome`` result record
- prompt: confirmation prompt capability
"""

from trail_export.models.geometry import (
    Coordinate,
    RouteEndpoints,
    validate_route_coordinates,
    validate_wgs84_coordinate,
)
from trail_export.models.location import UserLocation
from trail_export.models.navigation import (
    LinkMode,
    LinkShape,
    MultiStageLink,
    NavigationLeg,
    TravelMode,
)
from trail_export.models.outcome import ExportFailure, ExportOutcome
from trail_export.models.prompt import ConfirmPrompt, PromptOptions
from trail_export.models.request import ExportFormat, ExportRequest, StyleOptions, TravelPlan
from trail_export.models.snapshot import SnapshotStage, SnapshotState, Viewport

__all__ = [
    "ConfirmPrompt",
    "Coordinate",
    "ExportFailure",
    "ExportFormat",
    "ExportOutcome",
    "ExportRequest",
    "LinkMode",
    "LinkShape",
    "MultiStageLink",
    "NavigationLeg",
    "PromptOptions",
    "RouteEndpoints",
    "SnapshotStage",
    "SnapshotState",
    "StyleOptions",
    "TravelMode",
    "TravelPlan",
    "UserLocation",
    "Viewport",
    "validate_route_coordinates",
    "validate_wgs84_coordinate",
]

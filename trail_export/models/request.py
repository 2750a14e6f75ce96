"""Export request and style options."""

from __future__ import annotations

import enum
import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trail_export.models.location import UserLocation

_HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

GeometryRefiner = Callable[[Mapping[str, Any]], Awaitable[Mapping[str, Any]]]
"""``refine(geometry) -> geometry`` map-matching capability."""


class ExportFormat(enum.Enum):
    """Artifact formats produced by the exporter."""

    KML = "kml"
    GPX = "gpx"
    PNG = "png"

    @classmethod
    def parse(cls, value: ExportFormat | str) -> ExportFormat:
        """Accept an enum member or a case-insensitive name (``"KML"``).

        Raises:
            ValueError: If the value names no known format.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class TravelPlan(enum.Enum):
    """Which navigation legs a KML export should contain.

    Values:
        ASK:            Offer the driving leg if a prompt is available.
        TRAIL_ONLY:     Only the walking trail.
        DRIVE_AND_WALK: Drive to the trailhead, then the trail.
        DRIVE_ONLY:     Only the drive to the trailhead.
    """

    ASK = "ask"
    TRAIL_ONLY = "trail_only"
    DRIVE_AND_WALK = "drive_and_walk"
    DRIVE_ONLY = "drive_only"


class StyleOptions(BaseModel):
    """Colors and widths applied to exported lines.

    Colors are ``#RRGGBB``; KML receives them converted to ``AABBGGRR``.

    Attributes:
        line_color: Single-track KML line color.
        line_width: Single-track KML line width.
        driving_color: Multi-stage driving leg color.
        driving_width: Multi-stage driving leg width.
        walking_color: Multi-stage walking leg color.
        walking_width: Multi-stage walking leg width.
        display_color: Route color shown on the PNG card swatch
            (``line_color`` when unset).
        track_description: GPX ``<desc>`` (configured default when unset).
    """

    model_config = ConfigDict(frozen=True)

    line_color: str = "#FF0000"
    line_width: float = Field(default=3.0, gt=0)
    driving_color: str = "#FF0000"
    driving_width: float = Field(default=5.0, gt=0)
    walking_color: str = "#00FF00"
    walking_width: float = Field(default=4.0, gt=0)
    display_color: str | None = None
    track_description: str | None = None

    @field_validator("line_color", "driving_color", "walking_color", "display_color")
    @classmethod
    def _check_hex_color(cls, value: str | None) -> str | None:
        if value is not None and not _HEX_COLOR_RE.match(value):
            msg = f"expected a #RRGGBB color, got {value!r}"
            raise ValueError(msg)
        return value

    @property
    def swatch_color(self) -> str:
        return self.display_color or self.line_color


@dataclass(frozen=True, slots=True)
class ExportRequest:
    """Everything needed to export one route.

    Attributes:
        geometry: GeoJSON ``Feature``, ``LineString`` or ``MultiLineString``.
        display_name: Human-readable route name.
        format: Requested artifact format.
        style: Line styling; configured defaults when ``None``.
        refine: Per-request refinement hook, overriding the exporter's.
        user_location: Known user position; looked up when ``None``.
        travel_plan: Legs to include in a KML export.
        correlation_id: Identifier echoed into logs and error payloads.
    """

    geometry: Mapping[str, Any]
    display_name: str
    format: ExportFormat = ExportFormat.KML
    style: StyleOptions | None = None
    refine: GeometryRefiner | None = None
    user_location: UserLocation | None = None
    travel_plan: TravelPlan = TravelPlan.ASK
    correlation_id: str = ""

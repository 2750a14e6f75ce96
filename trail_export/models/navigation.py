"""Navigation legs and external directions links."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from trail_export.models.geometry import Coordinate


class TravelMode(enum.Enum):
    """Transport mode of a navigation leg (``travelmode`` link parameter)."""

    DRIVING = "driving"
    WALKING = "walking"


class LinkMode(enum.Enum):
    """What the caller asked the directions link to cover.

    Values:
        COMBINED:     Drive to the trailhead, then walk the trail.
        DRIVING_ONLY: Only the drive to the trailhead.
    """

    COMBINED = "combined"
    DRIVING_ONLY = "driving_only"


class LinkShape(enum.Enum):
    """The three link shapes a multi-stage request can produce."""

    THREE_WAYPOINT = "three_waypoint"
    DRIVING_TO_TRAILHEAD = "driving_to_trailhead"
    WALKING_TRAIL = "walking_trail"


@dataclass(frozen=True, slots=True)
class NavigationLeg:
    """A single origin → destination segment.

    ``origin`` is ``None`` when the navigation app should start from the
    device's own position.
    """

    origin: Coordinate | None
    destination: Coordinate
    mode: TravelMode


@dataclass(frozen=True, slots=True)
class MultiStageLink:
    """A directions link together with the legs it describes."""

    shape: LinkShape
    url: str
    legs: tuple[NavigationLeg, ...] = field(default_factory=tuple)

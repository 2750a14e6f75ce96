"""External navigation link composer.

Builds directions deep links for a third-party maps service from route
endpoints and an optional user location.

Link shapes (``select_link_shape``):

=====================  ==============  ==========================================
has user location      requested mode  shape
=====================  ==============  ==========================================
yes                    COMBINED        THREE_WAYPOINT: user → trailhead → trail end
yes                    DRIVING_ONLY    DRIVING_TO_TRAILHEAD: user → trailhead, driving
no                     any             WALKING_TRAIL: trail start → trail end, walking
=====================  ==============  ==========================================

A three-waypoint link carries no travel mode so the maps service can
pick the transport for each leg.
"""

from __future__ import annotations

import logging
from urllib.parse import quote, urlencode

from trail_export.activities.encode_route import format_number
from trail_export.models.geometry import Coordinate, RouteEndpoints, validate_wgs84_coordinate
from trail_export.models.location import UserLocation
from trail_export.models.navigation import (
    LinkMode,
    LinkShape,
    MultiStageLink,
    NavigationLeg,
    TravelMode,
)

logger = logging.getLogger("trail_export.activities.compose_links")

DIRECTIONS_BASE_URL = "https://www.google.com/maps/dir/"


def build_directions_link(
    origin: Coordinate | None,
    destination: Coordinate,
    mode: TravelMode,
) -> str:
    """Build a single-leg directions link.

    Args:
        origin: Start of the leg; ``None`` lets the maps service start
            from the device's own position (the ``origin`` parameter is
            omitted).
        destination: End of the leg.
        mode: ``travelmode`` parameter.

    Raises:
        InvalidCoordinateError: If a coordinate is out of range.
    """
    validate_wgs84_coordinate(destination, "directions destination")
    params: dict[str, str] = {"api": "1"}
    if origin is not None:
        validate_wgs84_coordinate(origin, "directions origin")
        params["origin"] = _lat_lng(origin)
    params["destination"] = _lat_lng(destination)
    params["travelmode"] = mode.value
    return f"{DIRECTIONS_BASE_URL}?{urlencode(params, safe=',')}"


def build_waypoint_link(*stops: Coordinate) -> str:
    """Build a multi-stop path link (``/dir/<a>/<b>/<c>/``) with no travel mode."""
    for stop in stops:
        validate_wgs84_coordinate(stop, "directions waypoint")
    path = "/".join(quote(_lat_lng(stop), safe="") for stop in stops)
    return f"{DIRECTIONS_BASE_URL}{path}/"


def select_link_shape(has_user_location: bool, mode: LinkMode) -> LinkShape:
    """Pick the link shape for a request.  Total over all inputs."""
    if not has_user_location:
        return LinkShape.WALKING_TRAIL
    if mode is LinkMode.DRIVING_ONLY:
        return LinkShape.DRIVING_TO_TRAILHEAD
    return LinkShape.THREE_WAYPOINT


def build_multi_stage_link(
    endpoints: RouteEndpoints,
    user_location: UserLocation | None = None,
    mode: LinkMode = LinkMode.COMBINED,
) -> MultiStageLink:
    """Build the directions link for a trail and an optional user location.

    An out-of-range ``user_location`` is treated as absent.

    Args:
        endpoints: Trail start and end.
        user_location: Where the user is, if known.
        mode: Whether the user wants the whole journey or only the drive.

    Returns:
        The link and the legs it covers.
    """
    if user_location is not None and not user_location.is_valid():
        logger.warning(
            "Ignoring out-of-range user location (%s, %s) for directions link",
            user_location.latitude,
            user_location.longitude,
        )
        user_location = None

    shape = select_link_shape(user_location is not None, mode)
    origin = user_location.to_coordinate() if user_location is not None else None
    trail_start = endpoints.start
    trail_end = endpoints.end

    if shape is LinkShape.THREE_WAYPOINT and origin is not None:
        url = build_waypoint_link(origin, trail_start, trail_end)
        legs = (
            NavigationLeg(origin=origin, destination=trail_start, mode=TravelMode.DRIVING),
            NavigationLeg(origin=trail_start, destination=trail_end, mode=TravelMode.WALKING),
        )
    elif shape is LinkShape.DRIVING_TO_TRAILHEAD and origin is not None:
        url = build_directions_link(origin, trail_start, TravelMode.DRIVING)
        legs = (NavigationLeg(origin=origin, destination=trail_start, mode=TravelMode.DRIVING),)
    else:
        url = build_directions_link(trail_start, trail_end, TravelMode.WALKING)
        legs = (NavigationLeg(origin=trail_start, destination=trail_end, mode=TravelMode.WALKING),)

    logger.debug("Directions link built | shape=%s | legs=%d", shape.value, len(legs))
    return MultiStageLink(shape=shape, url=url, legs=legs)


def describe_link(link: MultiStageLink, route_name: str) -> str:
    """Explain an opened link to the user."""
    if link.shape is LinkShape.THREE_WAYPOINT:
        return (
            "The maps app will show the route with 3 points:\n"
            "Start: your location\n"
            f'Parking: start of trail "{route_name}"\n'
            "Finish: end of the trail\n\n"
            "The maps app will suggest the best transport for each leg."
        )
    if link.shape is LinkShape.DRIVING_TO_TRAILHEAD:
        return f'Opened driving directions to the start of "{route_name}".'
    return f'Opened the walking route "{route_name}".'


def _lat_lng(coord: Coordinate) -> str:
    return f"{format_number(coord.lat)},{format_number(coord.lon)}"

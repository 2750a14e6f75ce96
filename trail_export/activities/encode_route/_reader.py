"""Read coordinates back out of KML and GPX documents.

Used to inspect produced artifacts: every ``LineString`` of a KML
document, every ``Point`` placemark, and the track points of a GPX
file, all in document order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from trail_export.core.constants import GPX_NAMESPACE, KML_NAMESPACE
from trail_export.core.exceptions import InvalidGeometryError
from trail_export.models.geometry import Coordinate

if TYPE_CHECKING:
    from lxml.etree import _Element


def parse_coordinates_text(text: str) -> list[Coordinate]:
    """Parse a KML ``<coordinates>`` string (``lon,lat[,alt]`` tuples).

    Raises:
        InvalidGeometryError: If a tuple cannot be parsed.
    """
    coords: list[Coordinate] = []
    for token in text.split():
        parts = token.split(",")
        if len(parts) < 2:
            msg = f"Malformed KML coordinate tuple: {token!r}"
            raise InvalidGeometryError(msg)
        coords.append(Coordinate.from_position(parts))
    return coords


def read_kml_lines(document: str) -> list[list[Coordinate]]:
    """Return the coordinates of every ``LineString`` in document order."""
    root = _parse(document)
    ns = {"kml": KML_NAMESPACE}
    return [
        parse_coordinates_text(elem.text or "")
        for elem in root.findall(".//kml:LineString/kml:coordinates", ns)
    ]


def read_kml_points(document: str) -> list[tuple[str, Coordinate]]:
    """Return ``(placemark name, coordinate)`` for every ``Point`` placemark."""
    root = _parse(document)
    ns = {"kml": KML_NAMESPACE}
    points: list[tuple[str, Coordinate]] = []
    for placemark in root.findall(".//kml:Placemark", ns):
        coords_elem = placemark.find("kml:Point/kml:coordinates", ns)
        if coords_elem is None:
            continue
        name_elem = placemark.find("kml:name", ns)
        name = (name_elem.text or "") if name_elem is not None else ""
        parsed = parse_coordinates_text(coords_elem.text or "")
        if parsed:
            points.append((name, parsed[0]))
    return points


def read_gpx_track_points(document: str) -> list[Coordinate]:
    """Return every ``<trkpt>`` of a GPX document in document order."""
    root = _parse(document)
    ns = {"gpx": GPX_NAMESPACE}
    coords: list[Coordinate] = []
    for trkpt in root.findall(".//gpx:trkpt", ns):
        ele_elem = trkpt.find("gpx:ele", ns)
        ele = float(ele_elem.text) if ele_elem is not None and ele_elem.text else None
        coords.append(
            Coordinate(lon=float(trkpt.get("lon")), lat=float(trkpt.get("lat")), ele=ele)
        )
    return coords


def _parse(document: str) -> _Element:
    from lxml import etree  # type: ignore[attr-defined]

    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    return etree.fromstring(document.encode("utf-8"), parser=parser)

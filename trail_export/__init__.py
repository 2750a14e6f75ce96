"""Trail route export.

Turns a stored trail geometry (GeoJSON line) into artifacts other tools
can consume: KML and GPX route files, drive-then-walk composite routes,
external navigation links, and an annotated PNG snapshot of the map.
"""

__version__ = "0.1.0"

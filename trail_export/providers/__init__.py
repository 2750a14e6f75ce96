"""External capabilities consumed by the exporter.

- LocationProvider / LocationCache: user position with a 5-minute cache
- MapCanvas / MapSource: the live map driven by the snapshot pipeline
- DownloadTarget / DirectoryDownloadTarget: where artifacts are saved
- TextMeasurer / PillowTextMeasurer: font metrics for the snapshot card
"""

from trail_export.providers.download import DirectoryDownloadTarget, DownloadTarget
from trail_export.providers.fonts import PillowTextMeasurer, TextMeasurer
from trail_export.providers.location import LocationCache, LocationProvider
from trail_export.providers.map_canvas import MapCanvas, MapSource

__all__ = [
    "DirectoryDownloadTarget",
    "DownloadTarget",
    "LocationCache",
    "LocationProvider",
    "MapCanvas",
    "MapSource",
    "PillowTextMeasurer",
    "TextMeasurer",
]

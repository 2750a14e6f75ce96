"""Export orchestration.

Sequences one export call:
1. Optional geometry refinement (KML/GPX) with fallback to the original
2. Coordinate extraction
3. Encoding (KML/GPX) or the map snapshot bracket (PNG)
4. Delivery to the download target, then optional follow-up prompts
"""

from trail_export.orchestrators.route_export import RouteExporter

__all__ = ["RouteExporter"]

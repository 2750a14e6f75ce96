"""Export activities.

Each activity is a focused unit of work used by the orchestrator:
- extract_geometry: GeoJSON normalisation, endpoints, bounds, length
- encode_route: KML / GPX document encoding
- compose_links: external directions links
- compose_snapshot: annotated PNG snapshot of the live map
"""

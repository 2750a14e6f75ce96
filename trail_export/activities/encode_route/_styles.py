"""Color conversion for KML styles.

KML colors are ``AABBGGRR``: alpha first, then the color channels in
reverse order.  ``#RRGGBB`` is converted by reversing its three byte
pairs and prefixing full opacity ``ff``::

    #FF0000 -> ff0000ff
    #00FF00 -> ff00ff00
    #12AB34 -> ff34ab12
"""

from __future__ import annotations

import re

_HEX_COLOR_RE = re.compile(r"^#?([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})$")

FULL_OPACITY = "ff"


def kml_color(hex_color: str) -> str:
    """Convert ``#RRGGBB`` to a lower-case KML ``AABBGGRR`` color.

    Raises:
        ValueError: If ``hex_color`` is not a six-digit hex color.
    """
    match = _HEX_COLOR_RE.match(hex_color.strip())
    if match is None:
        msg = f"Expected a #RRGGBB color, got {hex_color!r}"
        raise ValueError(msg)
    red, green, blue = match.groups()
    return f"{FULL_OPACITY}{blue}{green}{red}".lower()

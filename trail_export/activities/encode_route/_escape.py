"""XML escaping and number formatting shared by the KML and GPX encoders."""

from __future__ import annotations

import re
from xml.sax.saxutils import escape

# ``escape`` always handles ``&``, ``<`` and ``>``; quotes are added here so
# text is safe in both element content and attribute values.
_QUOTE_ENTITIES = {'"': "&quot;", "'": "&#39;"}

# Characters outside the XML 1.0 ``Char`` production.  They cannot appear in
# a document even as character references.
_XML_ILLEGAL_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def escape_xml(text: str) -> str:
    """Escape the five XML-reserved characters ``& < > " '``.

    Control characters that XML 1.0 forbids (everything below U+0020
    except tab, newline and carriage return, plus lone surrogates and
    U+FFFE/U+FFFF) are dropped.
    """
    return escape(_XML_ILLEGAL_RE.sub("", text), _QUOTE_ENTITIES)


def format_number(value: float) -> str:
    """Format a number for coordinates and widths.

    Integral values print without a fractional part (``3`` not ``3.0``);
    everything else uses the shortest round-trip representation and
    never exponent notation.
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))

    import numpy as np

    return np.format_float_positional(value, unique=True, trim="-")

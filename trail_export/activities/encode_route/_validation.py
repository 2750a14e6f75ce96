"""Well-formedness check for encoded documents.

Encoders build text by hand, so every document is parsed once with
lxml before it is delivered.  A failure here means an encoder bug, not
bad user input.
"""

from __future__ import annotations

from trail_export.core.exceptions import DocumentEncodingError


def ensure_well_formed(document: str, root_tag: str) -> None:
    """Parse ``document`` and check its root element's local name.

    Args:
        document: Encoded KML or GPX text.
        root_tag: Expected local name of the root (``"kml"`` or ``"gpx"``).

    Raises:
        DocumentEncodingError: If the text is not XML or has another root.
    """
    from lxml import etree  # type: ignore[attr-defined]

    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root = etree.fromstring(document.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as exc:
        msg = f"Encoded {root_tag.upper()} document is not valid XML: {exc}"
        raise DocumentEncodingError(msg) from exc

    local_name = etree.QName(root).localname
    if local_name != root_tag:
        msg = f"Encoded document root is <{local_name}>, expected <{root_tag}>"
        raise DocumentEncodingError(msg)

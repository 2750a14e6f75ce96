"""Filesystem-safe tokens for download filenames.

Display names are transliterated through a fixed table of extended
Latin letters, lower-cased, whitespace runs become single underscores,
and every character outside ``[a-z0-9_]`` is dropped.  A name with
nothing left falls back to ``SLUG_FALLBACK``.

Same input always produces the same slug.
"""

from __future__ import annotations

import re

from trail_export.core.constants import SLUG_FALLBACK

_TRANSLITERATION: dict[str, str] = {
    # Polish
    "ą": "a", "ć": "c", "ę": "e", "ł": "l", "ń": "n",
    "ó": "o", "ś": "s", "ź": "z", "ż": "z",
    "Ą": "A", "Ć": "C", "Ę": "E", "Ł": "L", "Ń": "N",
    "Ó": "O", "Ś": "S", "Ź": "Z", "Ż": "Z",
    # Czech / Slovak
    "á": "a", "č": "c", "ď": "d", "é": "e", "ě": "e", "í": "i", "ň": "n",
    "ř": "r", "š": "s", "ť": "t", "ú": "u", "ů": "u", "ý": "y", "ž": "z",
    "Á": "A", "Č": "C", "Ď": "D", "É": "E", "Ě": "E", "Í": "I", "Ň": "N",
    "Ř": "R", "Š": "S", "Ť": "T", "Ú": "U", "Ů": "U", "Ý": "Y", "Ž": "Z",
    # German
    "ä": "a", "ö": "o", "ü": "u", "ß": "ss",
    "Ä": "A", "Ö": "O", "Ü": "U",
}  # fmt: skip

_TRANSLATE_TABLE = str.maketrans(_TRANSLITERATION)
_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9_]+")


def slugify(value: str) -> str:
    """Convert a display name to a filename-safe slug.

    Args:
        value: Raw display name (e.g. ``"Szlak świętego Jana"``).

    Returns:
        A non-empty token of ``[a-z0-9_]`` characters
        (``"szlak_swietego_jana"``).
    """
    slug = value.translate(_TRANSLATE_TABLE).lower().strip()
    slug = _WHITESPACE_RE.sub("_", slug)
    slug = _DISALLOWED_RE.sub("", slug)
    return slug if slug else SLUG_FALLBACK


def build_filename(display_name: str, extension: str, *, suffix: str = "") -> str:
    """Build a download filename such as ``szlak_jana_with_driving.kml``."""
    return f"{slugify(display_name)}{suffix}{extension}"

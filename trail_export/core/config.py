"""Export configuration loaded from environment variables.

All values have sensible defaults.  ``from_env()`` raises
``ConfigValidationError`` if any value is out of its valid range, so a
bad deployment fails at startup instead of in the middle of an export.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from trail_export.core.exceptions import ExportError

_HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class ConfigValidationError(ExportError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ExportConfig:
    """Immutable export configuration.

    Attributes:
        location_cache_ttl_s: How long a successful location lookup is reused.
        location_timeout_s: Timeout handed to the location provider.
        location_high_accuracy: Whether to request a high-accuracy fix.
        kml_line_color: Default ``#RRGGBB`` color of the single-track KML line.
        kml_line_width: Default KML line width in pixels.
        gpx_track_description: Default ``<desc>`` of exported GPX tracks.
        snapshot_padding_ratio: Viewport padding as a fraction of the
            smaller canvas dimension.
        snapshot_idle_timeout_s: Upper bound on each map idle wait.
        snapshot_font_path: TrueType font for the PNG card (empty = Pillow default).
        download_dir: Directory the default download target writes into.
    """

    location_cache_ttl_s: float = 300.0
    location_timeout_s: float = 10.0
    location_high_accuracy: bool = True
    kml_line_color: str = "#FF0000"
    kml_line_width: float = 3.0
    gpx_track_description: str = "Exported trail route"
    snapshot_padding_ratio: float = 0.08
    snapshot_idle_timeout_s: float = 15.0
    snapshot_font_path: str = ""
    download_dir: str = "."

    @classmethod
    def from_env(cls) -> ExportConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range.
            ValueError: If a numeric variable cannot be parsed
                (e.g. ``TRAIL_EXPORT_KML_LINE_WIDTH=wide``).
        """
        config = cls(
            location_cache_ttl_s=float(os.getenv("TRAIL_EXPORT_LOCATION_CACHE_TTL_S", "300")),
            location_timeout_s=float(os.getenv("TRAIL_EXPORT_LOCATION_TIMEOUT_S", "10")),
            location_high_accuracy=(
                os.getenv("TRAIL_EXPORT_LOCATION_HIGH_ACCURACY", "true").strip().lower()
                in _TRUE_VALUES
            ),
            kml_line_color=os.getenv("TRAIL_EXPORT_KML_LINE_COLOR", "#FF0000"),
            kml_line_width=float(os.getenv("TRAIL_EXPORT_KML_LINE_WIDTH", "3")),
            gpx_track_description=os.getenv(
                "TRAIL_EXPORT_GPX_TRACK_DESCRIPTION", "Exported trail route"
            ),
            snapshot_padding_ratio=float(os.getenv("TRAIL_EXPORT_SNAPSHOT_PADDING_RATIO", "0.08")),
            snapshot_idle_timeout_s=float(os.getenv("TRAIL_EXPORT_SNAPSHOT_IDLE_TIMEOUT_S", "15")),
            snapshot_font_path=os.getenv("TRAIL_EXPORT_SNAPSHOT_FONT_PATH", ""),
            download_dir=os.getenv("TRAIL_EXPORT_DOWNLOAD_DIR", "."),
        )
        _validate(config)
        return config


def _validate(config: ExportConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.location_cache_ttl_s <= 0:
        raise ConfigValidationError(
            "TRAIL_EXPORT_LOCATION_CACHE_TTL_S",
            config.location_cache_ttl_s,
            "must be > 0 (seconds)",
        )

    if config.location_timeout_s <= 0:
        raise ConfigValidationError(
            "TRAIL_EXPORT_LOCATION_TIMEOUT_S",
            config.location_timeout_s,
            "must be > 0 (seconds)",
        )

    if not _HEX_COLOR_RE.match(config.kml_line_color):
        raise ConfigValidationError(
            "TRAIL_EXPORT_KML_LINE_COLOR",
            config.kml_line_color,
            "must be a #RRGGBB hex color",
        )

    if config.kml_line_width <= 0:
        raise ConfigValidationError(
            "TRAIL_EXPORT_KML_LINE_WIDTH",
            config.kml_line_width,
            "must be > 0 (pixels)",
        )

    if not 0.0 <= config.snapshot_padding_ratio < 0.5:
        raise ConfigValidationError(
            "TRAIL_EXPORT_SNAPSHOT_PADDING_RATIO",
            config.snapshot_padding_ratio,
            "must be in [0, 0.5)",
        )

    if config.snapshot_idle_timeout_s <= 0:
        raise ConfigValidationError(
            "TRAIL_EXPORT_SNAPSHOT_IDLE_TIMEOUT_S",
            config.snapshot_idle_timeout_s,
            "must be > 0 (seconds)",
        )

    if not config.download_dir:
        raise ConfigValidationError(
            "TRAIL_EXPORT_DOWNLOAD_DIR",
            config.download_dir,
            "must not be empty",
        )

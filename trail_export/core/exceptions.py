"""Unified export exception taxonomy.

Every domain exception inherits from ``ExportError`` and carries
structured context fields so the orchestrator can turn any failure into
a stable outcome payload and a message fit for the end user.

Taxonomy categories
-------------------
- ``ValidationError``: bad input (geometry, format, coordinates), never retryable.
- ``TransientError``: environment-dependent failures (location lookup,
  refinement service), may succeed on a later attempt.
- ``PermanentError``: the export cannot be produced in this environment
  (no map, rendering failure).

Every exception exposes ``to_error_dict()`` for a structured payload
suitable for logging and for ``ExportOutcome``.
"""

from __future__ import annotations

import enum


class ExportError(Exception):
    """Base exception for all export-domain errors.

    Attributes:
        message: Developer-facing error description.
        stage: Export stage where the error occurred
            (e.g. ``"extract_geometry"``, ``"compose_snapshot"``).
        code: Machine-readable error code (e.g. ``"INVALID_GEOMETRY"``).
        retryable: Whether repeating the export may succeed.
        correlation_id: Caller-supplied correlation identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""
    #: Text shown to the end user when this error aborts an export.
    default_user_message: str = "The route could not be exported."

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, TransientError):
            return "transient"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    @property
    def user_message(self) -> str:
        """Human-readable message for the end user."""
        return self.default_user_message

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "user_message": self.user_message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(ExportError):
    """Input or domain-model validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class TransientError(ExportError):
    """Failure that depends on the environment and may succeed later."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(ExportError):
    """Unrecoverable failure for this export. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class InvalidGeometryError(ValidationError):
    """Raised when a geometry is empty, unsupported, or malformed."""

    default_stage = "extract_geometry"
    default_code = "INVALID_GEOMETRY"
    default_user_message = "No coordinates to export for this route."


class InvalidCoordinateError(InvalidGeometryError):
    """Raised when a coordinate lies outside WGS 84 bounds."""

    default_code = "COORDINATE_OUT_OF_RANGE"
    default_user_message = "The route contains coordinates outside the valid range."


class UnsupportedFormatError(ValidationError):
    """Raised when an export format is not one of ``kml``, ``gpx``, ``png``."""

    default_stage = "route_export"
    default_code = "UNSUPPORTED_FORMAT"
    default_user_message = "This export format is not supported."


class DocumentEncodingError(PermanentError):
    """Raised when an encoded KML/GPX document is not well-formed XML."""

    default_stage = "encode_route"
    default_code = "DOCUMENT_MALFORMED"


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------


class LocationErrorKind(enum.Enum):
    """Classification of a failed user-location lookup."""

    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_LOCATION_USER_MESSAGES: dict[LocationErrorKind, str] = {
    LocationErrorKind.PERMISSION_DENIED: "Location access was denied.",
    LocationErrorKind.POSITION_UNAVAILABLE: "Your location is currently unavailable.",
    LocationErrorKind.TIMEOUT: "Locating you took too long.",
    LocationErrorKind.UNKNOWN: "Your location could not be determined.",
}


class LocationUnavailableError(TransientError):
    """Raised when the user's position cannot be obtained.

    Attributes:
        kind: Why the lookup failed.
    """

    default_stage = "locate_user"

    def __init__(
        self,
        kind: LocationErrorKind,
        message: str = "",
        **kwargs: object,
    ) -> None:
        self.kind = kind
        kwargs.setdefault("code", f"LOCATION_{kind.name}")
        super().__init__(message or _LOCATION_USER_MESSAGES[kind], **kwargs)

    @property
    def user_message(self) -> str:
        return _LOCATION_USER_MESSAGES[self.kind]


# ---------------------------------------------------------------------------
# Refinement / rendering
# ---------------------------------------------------------------------------


class RefinementFailedError(TransientError):
    """Geometry refinement failed; the original geometry is used instead."""

    default_stage = "refine_geometry"
    default_code = "REFINEMENT_FAILED"


class MapCapabilityMissingError(PermanentError):
    """Raised when a PNG export is requested without a map canvas."""

    default_stage = "compose_snapshot"
    default_code = "MAP_UNAVAILABLE"
    default_user_message = "The map is not available, so no image can be exported."


class RenderingStepFailedError(PermanentError):
    """Raised after restoration when a snapshot step failed.

    Attributes:
        step: Snapshot step that failed (``"isolate"``, ``"fit"``, ...).
    """

    default_stage = "compose_snapshot"
    default_code = "RENDERING_STEP_FAILED"
    default_user_message = "The map image could not be created."

    def __init__(self, step: str, message: str, **kwargs: object) -> None:
        self.step = step
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class RestorationFailedError(PermanentError):
    """A map state item could not be restored. Logged, never raised to callers."""

    default_stage = "compose_snapshot"
    default_code = "RESTORATION_FAILED"


class DownloadFailedError(PermanentError):
    """Raised when produced bytes cannot be handed to the download target."""

    default_stage = "download"
    default_code = "DOWNLOAD_FAILED"
    default_user_message = "The exported file could not be saved."

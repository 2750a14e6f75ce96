"""Result of an export call.

The orchestrator never raises: every call ends in an ``ExportOutcome``
that either names the produced file or carries a classified failure.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from trail_export.core.exceptions import ExportError


class ExportFailure(BaseModel):
    """Classified failure attached to an unsuccessful outcome.

    Attributes:
        category: ``validation``, ``transient`` or ``permanent``.
        code: Machine-readable error code.
        stage: Export stage that failed.
        message: Developer-facing description.
        user_message: Text to show the end user.
        retryable: Whether retrying may succeed.
    """

    category: str
    code: str
    stage: str = ""
    message: str = ""
    user_message: str = ""
    retryable: bool = False


class ExportOutcome(BaseModel):
    """Discriminated export result.

    Attributes:
        success: Whether an artifact was produced.
        format: Requested format (``kml``, ``gpx``, ``png``).
        filename: Name the artifact was delivered under (empty on failure).
        maps_url: External directions link computed for a KML export.
        multi_stage: Whether the KML contains a driving leg.
        warnings: Non-fatal problems (refinement, location, restoration).
        error: Failure details when ``success`` is false.
    """

    success: bool
    format: str
    filename: str = ""
    maps_url: str = ""
    multi_stage: bool = False
    warnings: list[str] = Field(default_factory=list)
    error: ExportFailure | None = None

    @classmethod
    def failed(cls, format_name: str, exc: ExportError) -> ExportOutcome:
        """Build a failure outcome from a domain exception."""
        return cls(
            success=False,
            format=format_name,
            error=ExportFailure(
                category=exc.category,
                code=exc.code,
                stage=exc.stage,
                message=exc.message,
                user_message=exc.user_message,
                retryable=exc.retryable,
            ),
        )

    @property
    def user_message(self) -> str:
        """End-user text for a failed export; empty on success."""
        return self.error.user_message if self.error is not None else ""

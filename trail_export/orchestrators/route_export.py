"""Route export orchestrator.

``RouteExporter.export`` dispatches by format and always returns an
``ExportOutcome``; domain failures are turned into classified outcomes
and unexpected exceptions are logged with their traceback.

KML exports may add a driving leg to the trailhead.  The travel plan
decides the legs:

- ``ASK``: when a location source and a confirmation prompt are both
  available, the user location is looked up (failure is non-fatal)
  and the user is asked whether to include the drive.
- ``TRAIL_ONLY``: only the trail; no lookup, no question.
- ``DRIVE_AND_WALK`` / ``DRIVE_ONLY``: the location is required and a
  lookup failure aborts the export.

After a successful KML export the user is offered the route in an
external maps service.  Nothing in that offer can fail the export.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from trail_export.activities.compose_links import build_multi_stage_link, describe_link
from trail_export.activities.compose_snapshot import SnapshotComposer, SnapshotLayers
from trail_export.activities.encode_route import (
    encode_drive_only_kml,
    encode_gpx,
    encode_kml,
    encode_multi_stage_kml,
    ensure_well_formed,
)
from trail_export.activities.extract_geometry import get_endpoints, require_coordinates
from trail_export.core.config import ExportConfig
from trail_export.core.constants import (
    DRIVE_ONLY_FILENAME_SUFFIX,
    DRIVING_FILENAME_SUFFIX,
    GPX_EXTENSION,
    GPX_MIME_TYPE,
    KML_EXTENSION,
    KML_MIME_TYPE,
)
from trail_export.core.exceptions import (
    ExportError,
    LocationErrorKind,
    LocationUnavailableError,
    PermanentError,
    RefinementFailedError,
    UnsupportedFormatError,
)
from trail_export.models.geometry import FEATURE, validate_route_coordinates
from trail_export.models.location import UserLocation
from trail_export.models.navigation import LinkMode
from trail_export.models.outcome import ExportOutcome
from trail_export.models.prompt import ConfirmPrompt, PromptOptions
from trail_export.models.request import (
    ExportFormat,
    ExportRequest,
    GeometryRefiner,
    StyleOptions,
    TravelPlan,
)
from trail_export.providers.download import DirectoryDownloadTarget, DownloadTarget
from trail_export.providers.fonts import PillowTextMeasurer
from trail_export.providers.location import LocationCache
from trail_export.providers.map_canvas import MapCanvas
from trail_export.utils.slug import build_filename

logger = logging.getLogger("trail_export.orchestrators.route_export")

UrlOpener = Callable[[str], Awaitable[None] | None]
"""Opens a URL in an external application (browser tab, maps app)."""


class RouteExporter:
    """Exports trail geometries as KML, GPX or annotated PNG.

    Every collaborator is optional and resolved once here; a missing
    capability only disables the features that need it.

    Args:
        config: Defaults and limits (``ExportConfig()`` when omitted).
        location: User location source for driving legs.
        confirm: Confirmation prompt for the optional questions.
        refine: Map-matching hook applied before KML/GPX encoding.
        canvas: Live map for PNG snapshots.
        download: Receives produced files (a ``DirectoryDownloadTarget``
            on ``config.download_dir`` when omitted).
        measurer: Card fonts (Pillow, ``config.snapshot_font_path``).
        open_url: Opens the external maps link.
        fallback_routes: Collection restored into the shared routes
            source if its original contents could not be captured.
        snapshot_layers: Layer ids touched by the snapshot.
    """

    def __init__(
        self,
        config: ExportConfig | None = None,
        *,
        location: LocationCache | None = None,
        confirm: ConfirmPrompt | None = None,
        refine: GeometryRefiner | None = None,
        canvas: MapCanvas | None = None,
        download: DownloadTarget | None = None,
        measurer: PillowTextMeasurer | None = None,
        open_url: UrlOpener | None = None,
        fallback_routes: Mapping[str, Any] | None = None,
        snapshot_layers: SnapshotLayers | None = None,
    ) -> None:
        self._config = config or ExportConfig()
        self._location = location
        self._confirm = confirm
        self._refine = refine
        self._open_url = open_url
        self._download = download or DirectoryDownloadTarget(self._config.download_dir)
        self._snapshots = SnapshotComposer(
            canvas,
            self._download,
            measurer=measurer or PillowTextMeasurer(self._config.snapshot_font_path),
            layers=snapshot_layers,
            padding_ratio=self._config.snapshot_padding_ratio,
            idle_timeout_s=self._config.snapshot_idle_timeout_s,
            fallback_routes=fallback_routes,
        )

    @property
    def config(self) -> ExportConfig:
        return self._config

    @property
    def snapshots(self) -> SnapshotComposer:
        return self._snapshots

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def export(
        self,
        geometry: Mapping[str, Any],
        name: str,
        format: ExportFormat | str = ExportFormat.KML,  # noqa: A002
        *,
        style: StyleOptions | None = None,
        refine: GeometryRefiner | None = None,
        user_location: UserLocation | None = None,
        travel_plan: TravelPlan = TravelPlan.ASK,
        correlation_id: str = "",
    ) -> ExportOutcome:
        """Export ``geometry`` under ``name`` in ``format``.

        ``format`` is matched case-insensitively; an unknown format
        yields a failed outcome (``UNSUPPORTED_FORMAT``).
        """
        try:
            export_format = ExportFormat.parse(format)
        except ValueError:
            format_name = str(getattr(format, "value", format)).lower()
            exc = UnsupportedFormatError(
                f"Unsupported export format: {format_name!r}",
                correlation_id=correlation_id,
            )
            logger.error("Export rejected | format=%s | name=%s", format_name, name)
            return ExportOutcome.failed(format_name, exc)

        request = ExportRequest(
            geometry=geometry,
            display_name=name,
            format=export_format,
            style=style,
            refine=refine,
            user_location=user_location,
            travel_plan=travel_plan,
            correlation_id=correlation_id,
        )
        return await self.export_request(request)

    async def export_request(self, request: ExportRequest) -> ExportOutcome:
        """Run one export; never raises for export failures."""
        format_name = request.format.value
        logger.info(
            "Export started | format=%s | name=%s | correlation_id=%s",
            format_name,
            request.display_name,
            request.correlation_id,
        )
        try:
            if request.format is ExportFormat.KML:
                outcome = await self._export_kml(request)
            elif request.format is ExportFormat.GPX:
                outcome = await self._export_gpx(request)
            elif request.format is ExportFormat.PNG:
                outcome = await self._export_png(request)
            else:
                msg = f"Unsupported export format: {format_name!r}"
                raise UnsupportedFormatError(msg)
        except ExportError as exc:
            exc.correlation_id = exc.correlation_id or request.correlation_id
            logger.error(
                "Export failed | format=%s | name=%s | code=%s | stage=%s | %s",
                format_name,
                request.display_name,
                exc.code,
                exc.stage,
                exc.message,
            )
            return ExportOutcome.failed(format_name, exc)
        except Exception as exc:
            logger.exception(
                "Export failed unexpectedly | format=%s | name=%s",
                format_name,
                request.display_name,
            )
            wrapped = PermanentError(
                f"Unexpected error: {exc}",
                stage="route_export",
                code="EXPORT_FAILED",
                correlation_id=request.correlation_id,
            )
            return ExportOutcome.failed(format_name, wrapped)

        logger.info(
            "Export completed | format=%s | file=%s | multi_stage=%s | warnings=%d",
            format_name,
            outcome.filename,
            outcome.multi_stage,
            len(outcome.warnings),
        )
        return outcome

    # ------------------------------------------------------------------
    # Formats
    # ------------------------------------------------------------------

    async def _export_kml(self, request: ExportRequest) -> ExportOutcome:
        warnings: list[str] = []
        name = request.display_name
        geometry = await self._refined_geometry(request, warnings)
        coords = require_coordinates(geometry, f"route '{name}'")
        style = self._style(request)

        plan, user_location = await self._resolve_travel_plan(request, warnings)

        if plan is TravelPlan.DRIVE_AND_WALK and user_location is not None:
            document = encode_multi_stage_kml(coords, name, user_location, style)
            suffix = DRIVING_FILENAME_SUFFIX
        elif plan is TravelPlan.DRIVE_ONLY and user_location is not None:
            document = encode_drive_only_kml(coords, name, user_location, style)
            suffix = DRIVE_ONLY_FILENAME_SUFFIX
        else:
            document = encode_kml(coords, name, style)
            suffix = ""
        ensure_well_formed(document, "kml")

        filename = build_filename(name, KML_EXTENSION, suffix=suffix)
        self._download.deliver(document.encode("utf-8"), filename, KML_MIME_TYPE)

        link_mode = LinkMode.DRIVING_ONLY if plan is TravelPlan.DRIVE_ONLY else LinkMode.COMBINED
        maps_url = await self._offer_maps_link(geometry, name, user_location, link_mode, warnings)

        return ExportOutcome(
            success=True,
            format=ExportFormat.KML.value,
            filename=filename,
            maps_url=maps_url,
            multi_stage=bool(suffix),
            warnings=warnings,
        )

    async def _export_gpx(self, request: ExportRequest) -> ExportOutcome:
        warnings: list[str] = []
        name = request.display_name
        geometry = await self._refined_geometry(request, warnings)
        coords = require_coordinates(geometry, f"route '{name}'")
        style = request.style
        description = (
            style.track_description
            if style is not None and style.track_description is not None
            else self._config.gpx_track_description
        )

        document = encode_gpx(coords, name, description)
        ensure_well_formed(document, "gpx")

        filename = build_filename(name, GPX_EXTENSION)
        self._download.deliver(document.encode("utf-8"), filename, GPX_MIME_TYPE)
        return ExportOutcome(
            success=True,
            format=ExportFormat.GPX.value,
            filename=filename,
            warnings=warnings,
        )

    async def _export_png(self, request: ExportRequest) -> ExportOutcome:
        name = request.display_name
        context = f"route '{name}'"
        coords = require_coordinates(request.geometry, context)
        validate_route_coordinates(coords, context)
        style = self._style(request)

        result = await self._snapshots.compose(
            coords,
            name,
            swatch_color=style.swatch_color,
            target_feature=_as_feature(request.geometry, name),
        )
        return ExportOutcome(
            success=True,
            format=ExportFormat.PNG.value,
            filename=result.filename,
            warnings=list(result.restoration_failures),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _style(self, request: ExportRequest) -> StyleOptions:
        if request.style is not None:
            return request.style
        return StyleOptions(
            line_color=self._config.kml_line_color,
            line_width=self._config.kml_line_width,
        )

    async def _refined_geometry(
        self,
        request: ExportRequest,
        warnings: list[str],
    ) -> Mapping[str, Any]:
        """Apply the refinement hook, keeping the original on any failure."""
        refine = request.refine or self._refine
        if refine is None:
            return request.geometry
        try:
            refined = await refine(request.geometry)
            require_coordinates(refined, "refined geometry")
        except Exception as exc:
            failure = RefinementFailedError(
                f"Refinement failed, using the original geometry: {exc}",
                correlation_id=request.correlation_id,
            )
            logger.warning(
                "Refinement failed | name=%s | code=%s | %s",
                request.display_name,
                failure.code,
                exc,
            )
            warnings.append(failure.message)
            return request.geometry
        logger.debug("Geometry refined | name=%s", request.display_name)
        return refined

    async def _resolve_travel_plan(
        self,
        request: ExportRequest,
        warnings: list[str],
    ) -> tuple[TravelPlan, UserLocation | None]:
        """Decide the KML legs and fetch the user location they need."""
        plan = request.travel_plan
        if plan is TravelPlan.TRAIL_ONLY:
            return plan, None

        if plan in (TravelPlan.DRIVE_AND_WALK, TravelPlan.DRIVE_ONLY):
            return plan, await self._require_location(request)

        if self._confirm is None or (request.user_location is None and self._location is None):
            return TravelPlan.TRAIL_ONLY, None

        try:
            user_location = await self._require_location(request)
        except LocationUnavailableError as exc:
            logger.warning(
                "Driving leg not offered | name=%s | code=%s",
                request.display_name,
                exc.code,
            )
            warnings.append(exc.user_message)
            return TravelPlan.TRAIL_ONLY, None

        include_drive = await self._ask(
            PromptOptions(
                title="KML file type",
                message=(
                    "Do you want a KML that includes driving from your current "
                    f'location to the trail "{request.display_name}"?'
                ),
                confirm_label="Yes, include driving",
                cancel_label="No, trail only",
            ),
            warnings,
        )
        if include_drive:
            return TravelPlan.DRIVE_AND_WALK, user_location
        return TravelPlan.TRAIL_ONLY, None

    async def _require_location(self, request: ExportRequest) -> UserLocation:
        if request.user_location is not None:
            if not request.user_location.is_valid():
                msg = (
                    "Supplied user location is out of range "
                    f"({request.user_location.latitude}, {request.user_location.longitude})"
                )
                raise LocationUnavailableError(LocationErrorKind.POSITION_UNAVAILABLE, msg)
            return request.user_location
        if self._location is None:
            msg = "No location source is configured"
            raise LocationUnavailableError(LocationErrorKind.POSITION_UNAVAILABLE, msg)
        return await self._location.get()

    async def _ask(self, options: PromptOptions, warnings: list[str]) -> bool:
        """Ask a question; a missing or failing prompt counts as "no"."""
        if self._confirm is None:
            return False
        try:
            return bool(await self._confirm(options))
        except Exception as exc:
            logger.warning("Prompt failed | title=%s | error=%s", options.title, exc)
            warnings.append(f"Prompt '{options.title}' failed: {exc}")
            return False

    async def _offer_maps_link(
        self,
        geometry: Mapping[str, Any],
        name: str,
        user_location: UserLocation | None,
        mode: LinkMode,
        warnings: list[str],
    ) -> str:
        """Compute the directions link and offer to open it.

        Returns:
            The link, or ``""`` when the route has no endpoints or the
            link could not be built.
        """
        endpoints = get_endpoints(geometry)
        if endpoints is None:
            return ""
        try:
            link = build_multi_stage_link(endpoints, user_location, mode)
        except ExportError as exc:
            logger.warning("Maps link not built | name=%s | %s", name, exc.message)
            warnings.append(exc.message)
            return ""

        if self._confirm is None or self._open_url is None:
            return link.url

        accepted = await self._ask(
            PromptOptions(
                title="Open in maps?",
                message=(
                    "The file has been downloaded. "
                    "Do you also want to open this route in maps?"
                ),
                confirm_label="Open in maps",
                cancel_label="No, thanks",
            ),
            warnings,
        )
        if not accepted:
            return link.url

        try:
            opened = self._open_url(link.url)
            if inspect.isawaitable(opened):
                await opened
        except Exception as exc:
            logger.warning("Maps link not opened | name=%s | error=%s", name, exc)
            warnings.append(f"Could not open the route in maps: {exc}")
            return link.url

        logger.info("Maps link opened | name=%s | shape=%s", name, link.shape.value)
        await self._ask(
            PromptOptions(
                title="Route opened in maps",
                message=describe_link(link, name),
                confirm_label="OK",
                cancel_label=None,
            ),
            warnings,
        )
        return link.url


def _as_feature(geometry: Mapping[str, Any] | object, name: str) -> Mapping[str, Any]:
    """Return ``geometry`` as a GeoJSON ``Feature``, wrapping bare shapes unchanged."""
    shape = geometry if isinstance(geometry, Mapping) else geometry.__geo_interface__
    if shape.get("type") == FEATURE:
        return shape
    return {"type": FEATURE, "properties": {"name": name}, "geometry": dict(shape)}

"""Tests for the PNG snapshot composer.

Covers:
- Successful export: isolated source, hidden overlays, widened lines,
  flat north-up fit with padding, annotated PNG, slugged filename
- A failure injected at every step leaves the map exactly as it was
- Idle timeouts, missing map, empty routes
- Restoration is best-effort and never masks the original error
- Fallback dataset when the original source contents are unreadable
- Concurrent exports are serialised
"""

from __future__ import annotations

import asyncio
import io
from typing import Any
from unittest.mock import MagicMock

import pytest
from PIL import Image

from trail_export.activities.compose_snapshot import (
    SnapshotComposer,
    SnapshotLayers,
    restore_state,
)
from trail_export.core.constants import (
    ALL_ROUTES_SOURCE_ID,
    EXPORT_CASING_WIDTH,
    EXPORT_LINE_WIDTH,
    PNG_MIME_TYPE,
    ROUTE_CASING_LAYERS,
    ROUTE_LINE_LAYERS,
    TRANSIENT_OVERLAY_LAYERS,
)
from trail_export.core.exceptions import (
    DownloadFailedError,
    InvalidGeometryError,
    MapCapabilityMissingError,
    RenderingStepFailedError,
)
from trail_export.models.geometry import Coordinate
from trail_export.models.snapshot import SnapshotStage, SnapshotState, Viewport
from trail_export.providers.map_canvas import MapCanvas

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture()
def composer(fake_map: Any, download: Any, measurer: Any) -> SnapshotComposer:
    return SnapshotComposer(fake_map, download, measurer=measurer)


class TestSuccessfulSnapshot:
    """The happy path."""

    @pytest.mark.asyncio()
    async def test_delivers_png(
        self, composer: SnapshotComposer, download: Any, trail_coords: list[Coordinate]
    ) -> None:
        result = await composer.compose(trail_coords, "Dolina Kościeliska")

        assert result.filename == "dolina_koscieliska.png"
        content, mime = download.files["dolina_koscieliska.png"]
        assert mime == PNG_MIME_TYPE
        assert content.startswith(PNG_SIGNATURE)
        assert Image.open(io.BytesIO(content)).size == (800, 600)
        assert result.size == (800, 600)
        assert result.length_km > 0
        assert result.restoration_failures == ()

    @pytest.mark.asyncio()
    async def test_map_state_while_rasterising(
        self, composer: SnapshotComposer, fake_map: Any, trail_coords: list[Coordinate]
    ) -> None:
        await composer.compose(trail_coords, "Dolina")

        seen = fake_map.rasterized_under
        assert len(seen["routes"]["features"]) == 1
        assert seen["routes"]["features"][0]["geometry"]["coordinates"][0] == [
            19.9561,
            49.2325,
            1010.0,
        ]
        for layer in TRANSIENT_OVERLAY_LAYERS:
            assert seen["layout"][(layer, "visibility")] == "none"
        assert seen["paint"][(ROUTE_LINE_LAYERS[0], "line-width")] == EXPORT_LINE_WIDTH
        assert seen["paint"][(ROUTE_CASING_LAYERS[0], "line-width")] == EXPORT_CASING_WIDTH
        assert seen["viewport"].pitch == 0
        assert seen["viewport"].bearing == 0

    @pytest.mark.asyncio()
    async def test_fit_uses_route_bounds_and_padding(
        self, composer: SnapshotComposer, fake_map: Any, trail_coords: list[Coordinate]
    ) -> None:
        await composer.compose(trail_coords, "Dolina")

        bbox, padding = fake_map.fitted
        assert bbox == (19.9561, 49.2257, 19.9812, 49.2325)
        assert padding == 48
        assert fake_map.idle_waits == 2

    @pytest.mark.asyncio()
    async def test_target_feature_is_isolated(
        self,
        composer: SnapshotComposer,
        fake_map: Any,
        trail_coords: list[Coordinate],
        trail_feature: dict[str, Any],
    ) -> None:
        await composer.compose(trail_coords, "Dolina", target_feature=trail_feature)
        assert fake_map.rasterized_under["routes"]["features"] == [trail_feature]

    @pytest.mark.asyncio()
    async def test_state_restored_after_success(
        self, composer: SnapshotComposer, fake_map: Any, trail_coords: list[Coordinate]
    ) -> None:
        before = fake_map.snapshot()
        await composer.compose(trail_coords, "Dolina")
        assert fake_map.snapshot() == before
        assert composer.stage is SnapshotStage.IDLE

    @pytest.mark.asyncio()
    async def test_card_is_drawn(
        self, composer: SnapshotComposer, download: Any, trail_coords: list[Coordinate]
    ) -> None:
        await composer.compose(trail_coords, "Dolina", swatch_color="#FF0000")

        image = Image.open(io.BytesIO(download.files["dolina.png"][0])).convert("RGB")
        assert image.getpixel((37, 42)) == (255, 0, 0)
        assert image.getpixel((150, 80))[0] > 200
        assert image.getpixel((700, 500)) == (180, 180, 180)

    @pytest.mark.asyncio()
    async def test_high_density_canvas(
        self, make_map: Any, download: Any, measurer: Any, trail_coords: list[Coordinate]
    ) -> None:
        composer = SnapshotComposer(make_map(pixel_ratio=2.0), download, measurer=measurer)
        result = await composer.compose(trail_coords, "Dolina")
        assert result.size == (1600, 1200)

    @pytest.mark.asyncio()
    async def test_map_without_shared_source(
        self, composer: SnapshotComposer, fake_map: Any, trail_coords: list[Coordinate]
    ) -> None:
        fake_map.sources.clear()
        result = await composer.compose(trail_coords, "Dolina")
        assert result.filename == "dolina.png"
        assert fake_map.idle_waits == 1
        assert fake_map.rasterized_under is not None
        assert fake_map.rasterized_under["routes"] is None


class TestFailureRestoresState:
    """A failure at any step is reported after the map is restored."""

    @pytest.mark.asyncio()
    @pytest.mark.parametrize(
        ("operation", "step"),
        [
            ("set_data", "isolate"),
            ("once_idle", "isolate"),
            ("set_layout_property", "hide"),
            ("set_paint_property", "style"),
            ("set_viewport", "fit"),
            ("fit_bounds", "fit"),
            ("rasterize_canvas", "rasterize"),
        ],
    )
    async def test_map_failure(
        self,
        composer: SnapshotComposer,
        fake_map: Any,
        trail_coords: list[Coordinate],
        operation: str,
        step: str,
    ) -> None:
        before = fake_map.snapshot()
        fake_map.fail_once(operation)

        with pytest.raises(RenderingStepFailedError) as exc_info:
            await composer.compose(trail_coords, "Dolina")

        assert exc_info.value.step == step
        assert exc_info.value.code == "RENDERING_STEP_FAILED"
        assert fake_map.snapshot() == before
        assert composer.stage is SnapshotStage.IDLE

    @pytest.mark.asyncio()
    async def test_annotate_failure(
        self,
        composer: SnapshotComposer,
        fake_map: Any,
        trail_coords: list[Coordinate],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def broken_draw(*_: object, **__: object) -> None:
            raise OSError("cannot open font")

        monkeypatch.setattr(
            "trail_export.activities.compose_snapshot._composer.draw_card", broken_draw
        )
        before = fake_map.snapshot()

        with pytest.raises(RenderingStepFailedError) as exc_info:
            await composer.compose(trail_coords, "Dolina")

        assert exc_info.value.step == "annotate"
        assert fake_map.snapshot() == before

    @pytest.mark.asyncio()
    async def test_download_failure(
        self,
        composer: SnapshotComposer,
        fake_map: Any,
        download: Any,
        trail_coords: list[Coordinate],
    ) -> None:
        download.fail_with = RuntimeError("browser blocked the download")
        before = fake_map.snapshot()

        with pytest.raises(RenderingStepFailedError) as exc_info:
            await composer.compose(trail_coords, "Dolina")

        assert exc_info.value.step == "download"
        assert fake_map.snapshot() == before

    @pytest.mark.asyncio()
    async def test_domain_errors_pass_through(
        self,
        composer: SnapshotComposer,
        fake_map: Any,
        download: Any,
        trail_coords: list[Coordinate],
    ) -> None:
        download.fail_with = DownloadFailedError("disk full")
        before = fake_map.snapshot()

        with pytest.raises(DownloadFailedError):
            await composer.compose(trail_coords, "Dolina")

        assert fake_map.snapshot() == before

    @pytest.mark.asyncio()
    async def test_idle_timeout(
        self, fake_map: Any, download: Any, measurer: Any, trail_coords: list[Coordinate]
    ) -> None:
        async def never_idle() -> None:
            await asyncio.Event().wait()

        fake_map.once_idle = never_idle
        composer = SnapshotComposer(fake_map, download, measurer=measurer, idle_timeout_s=0.01)
        before = fake_map.snapshot()

        with pytest.raises(RenderingStepFailedError, match="idle") as exc_info:
            await composer.compose(trail_coords, "Dolina")

        assert exc_info.value.step == "isolate"
        assert fake_map.snapshot() == before

    @pytest.mark.asyncio()
    async def test_capture_failure_mutates_nothing(
        self, composer: SnapshotComposer, fake_map: Any, trail_coords: list[Coordinate]
    ) -> None:
        before = fake_map.snapshot()
        fake_map.fail_once("get_viewport")

        with pytest.raises(RenderingStepFailedError) as exc_info:
            await composer.compose(trail_coords, "Dolina")

        assert exc_info.value.step == "capture"
        assert fake_map.snapshot() == before
        assert composer.stage is SnapshotStage.IDLE


class TestPreconditions:
    """Fail fast before touching the map."""

    @pytest.mark.asyncio()
    async def test_no_map(self, download: Any, trail_coords: list[Coordinate]) -> None:
        composer = SnapshotComposer(None, download)

        with pytest.raises(MapCapabilityMissingError) as exc_info:
            await composer.compose(trail_coords, "Dolina")

        assert exc_info.value.user_message.startswith("The map is not available")
        assert not composer.available

    @pytest.mark.asyncio()
    async def test_empty_route(self, composer: SnapshotComposer, fake_map: Any) -> None:
        before = fake_map.snapshot()
        with pytest.raises(InvalidGeometryError):
            await composer.compose([], "Dolina")
        assert fake_map.snapshot() == before


class TestSourceFallback:
    """Original source contents unavailable."""

    @pytest.mark.asyncio()
    async def test_fallback_routes_reloaded(
        self, fake_map: Any, download: Any, measurer: Any, trail_coords: list[Coordinate]
    ) -> None:
        fallback = {"type": "FeatureCollection", "features": [{"type": "Feature", "id": "all"}]}
        fake_map.sources[ALL_ROUTES_SOURCE_ID].data = None
        composer = SnapshotComposer(
            fake_map, download, measurer=measurer, fallback_routes=fallback
        )

        result = await composer.compose(trail_coords, "Dolina")

        assert fake_map.sources[ALL_ROUTES_SOURCE_ID].data == fallback
        assert result.restoration_failures == ()

    @pytest.mark.asyncio()
    async def test_missing_fallback_is_reported_not_raised(
        self, composer: SnapshotComposer, fake_map: Any, trail_coords: list[Coordinate]
    ) -> None:
        fake_map.sources[ALL_ROUTES_SOURCE_ID].data = None

        result = await composer.compose(trail_coords, "Dolina")

        assert len(result.restoration_failures) == 1
        assert "all-routes" in result.restoration_failures[0]

    @pytest.mark.asyncio()
    async def test_restoration_failure_does_not_mask_original_error(
        self, composer: SnapshotComposer, fake_map: Any, trail_coords: list[Coordinate]
    ) -> None:
        fake_map.sources[ALL_ROUTES_SOURCE_ID].data = None
        fake_map.fail_once("rasterize_canvas")

        with pytest.raises(RenderingStepFailedError) as exc_info:
            await composer.compose(trail_coords, "Dolina")

        assert exc_info.value.step == "rasterize"


class TestRestoreState:
    """Best-effort restoration, item by item."""

    def test_continues_after_item_failure(self) -> None:
        canvas = MagicMock(spec=MapCanvas)
        canvas.set_layout_property.side_effect = RuntimeError("layer removed")
        source = MagicMock()
        canvas.get_source.return_value = source
        viewport = Viewport(center=(19.0, 49.0), zoom=10.0, pitch=30.0, bearing=5.0)
        original = {"type": "FeatureCollection", "features": []}
        state = SnapshotState(
            viewport=viewport,
            paint={("route-line", "line-width"): 3},
            visibility={"route-progress": "visible"},
            source_data=original,
            source_isolated=True,
        )

        failures = restore_state(canvas, state, SnapshotLayers())

        assert len(failures) == 1
        assert failures[0].code == "RESTORATION_FAILED"
        canvas.set_paint_property.assert_called_once_with("route-line", "line-width", 3)
        source.set_data.assert_called_once_with(original)
        canvas.set_viewport.assert_called_once_with(viewport)

    def test_untouched_source_is_not_written(self) -> None:
        canvas = MagicMock(spec=MapCanvas)
        state = SnapshotState(viewport=Viewport(center=(0.0, 0.0), zoom=1.0))

        assert restore_state(canvas, state, SnapshotLayers()) == []
        canvas.get_source.assert_not_called()


class TestSerialisation:
    """Two exports never interleave their isolate/restore brackets."""

    @pytest.mark.asyncio()
    async def test_concurrent_exports_run_one_after_another(
        self, composer: SnapshotComposer, fake_map: Any, trail_coords: list[Coordinate]
    ) -> None:
        source = fake_map.sources[ALL_ROUTES_SOURCE_ID]
        original_set_data = source.set_data
        feature_counts: list[int] = []

        def recording_set_data(data: dict[str, Any]) -> None:
            feature_counts.append(len(data["features"]))
            original_set_data(data)

        async def yielding_idle() -> None:
            await asyncio.sleep(0)

        source.set_data = recording_set_data
        fake_map.once_idle = yielding_idle

        first, second = await asyncio.gather(
            composer.compose(trail_coords, "First"),
            composer.compose(trail_coords, "Second"),
        )

        assert {first.filename, second.filename} == {"first.png", "second.png"}
        assert feature_counts == [1, 2, 1, 2]

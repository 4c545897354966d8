"""
Unit Tests for the Carbon Pipeline
==================================

Stage selection and side effects, with the renderer mocked out.
"""

import re
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from carbon_now.config.defaults import DEFAULT_SETTINGS
from carbon_now.core.exceptions import InputError, RenderFailure
from carbon_now.core.pipeline import CarbonPipeline, carbonize
from carbon_now.core.pipeline.carbon import generate_name_id, output_base_name
from carbon_now.core.rendering.invocation import RenderInvocation
from carbon_now.models.schemas import CarbonizeRequest, CarbonSettings

from tests.utils.helpers import query_of, workspace_entries

SETTINGS = CarbonSettings.from_mapping(DEFAULT_SETTINGS)


@pytest.fixture
def mock_renderer() -> MagicMock:
    renderer = MagicMock(spec=RenderInvocation)

    async def render(url, workspace, image_kind="png", final_path=None, headless=True):
        artifact = Path(workspace) / f"carbon.{image_kind}"
        artifact.write_bytes(b"\x89PNG")
        return artifact

    renderer.render = AsyncMock(side_effect=render)
    return renderer


@pytest.fixture
def pipeline(test_settings, mock_renderer, mock_clipboard, mock_browser_opener) -> CarbonPipeline:
    return CarbonPipeline(
        renderer=mock_renderer, clipboard=mock_clipboard, browser_opener=mock_browser_opener
    )


def make_request(tmp_path: Path, **overrides) -> CarbonizeRequest:
    fields = dict(input_text="x = 1\n", file_name="snippet.py", location=tmp_path)
    fields.update(overrides)
    return CarbonizeRequest(**fields)


class TestNaming:
    """Test output file naming."""

    def test_name_id_alphabet(self):
        assert re.fullmatch(r"[1-6a-f]{10}", generate_name_id())

    def test_base_name_from_file(self, tmp_path):
        name = output_base_name(make_request(tmp_path, file_name="src/hello.py"))
        assert re.fullmatch(r"hello-[1-6a-f]{10}", name)

    def test_base_name_from_stdin(self, tmp_path):
        assert output_base_name(make_request(tmp_path, file_name=None)).startswith("stdin-")

    def test_target_wins(self, tmp_path):
        assert output_base_name(make_request(tmp_path, target="banner")) == "banner"


class TestCarbonPipeline:
    """Test the five Carbon stages."""

    def test_task_titles(self, pipeline, tmp_path):
        titles = [task.title for task in pipeline.build_tasks(make_request(tmp_path))]
        assert titles == [
            "Processing snippet.py",
            "Preparing connection",
            "Opening in browser",
            "Fetching beautiful image",
            "Copying image to clipboard",
        ]

    @pytest.mark.asyncio
    async def test_save_mode(self, pipeline, mock_renderer, mock_browser_opener, tmp_path):
        out = tmp_path / "out"
        ctx = await pipeline.run(make_request(tmp_path, location=out, target="shot"), SETTINGS)

        assert ctx.request.location == out
        _, kwargs = mock_renderer.render.await_args
        assert kwargs["final_path"] == out / "shot.png"
        assert kwargs["headless"] is True
        mock_browser_opener.assert_not_called()

    @pytest.mark.asyncio
    async def test_url_carries_runtime_fields(self, pipeline, tmp_path):
        ctx = await pipeline.run(make_request(tmp_path), SETTINGS)

        params = query_of(ctx.url)
        assert params["l"] == "python"
        assert params["code"] == "x%20%3D%201"
        assert ctx.url.startswith("https://carbon.now.sh/?")
        assert SETTINGS.code is None

    @pytest.mark.asyncio
    async def test_svg_export(self, pipeline, mock_renderer, tmp_path):
        await pipeline.run(make_request(tmp_path, target="vector"), SETTINGS.merge({"type": "svg"}))

        args, kwargs = mock_renderer.render.await_args
        assert args[2] == "svg"
        assert kwargs["final_path"].name == "vector.svg"

    @pytest.mark.asyncio
    async def test_open_mode_skips_fetch_and_copy(
        self, pipeline, mock_renderer, mock_clipboard, mock_browser_opener, tmp_path
    ):
        ctx = await pipeline.run(
            make_request(tmp_path, open_in_browser=True, copy_to_clipboard=True), SETTINGS
        )

        mock_browser_opener.assert_called_once_with(ctx.url)
        mock_renderer.render.assert_not_awaited()
        mock_clipboard.copy_image.assert_not_awaited()
        assert ctx.downloaded_as is None

    @pytest.mark.asyncio
    async def test_copy_mode_keeps_image_in_workspace(
        self, pipeline, mock_renderer, mock_clipboard, test_settings, tmp_path
    ):
        ctx = await pipeline.run(make_request(tmp_path, copy_to_clipboard=True), SETTINGS)

        _, kwargs = mock_renderer.render.await_args
        assert kwargs["final_path"] is None
        copied_path, copied_bytes = mock_clipboard.copied[0]
        assert copied_path.parent.parent == test_settings.workspace_root
        assert copied_bytes == b"\x89PNG"
        assert ctx.downloaded_as == copied_path

    @pytest.mark.asyncio
    async def test_workspace_removed_after_run(self, pipeline, test_settings, tmp_path):
        await pipeline.run(make_request(tmp_path, copy_to_clipboard=True), SETTINGS)
        assert workspace_entries(test_settings) == []

    @pytest.mark.asyncio
    async def test_workspace_removed_after_failure(
        self, pipeline, mock_renderer, test_settings, tmp_path
    ):
        mock_renderer.render.side_effect = RenderFailure("no marker")

        with pytest.raises(RenderFailure) as exc_info:
            await pipeline.run(make_request(tmp_path), SETTINGS)

        assert exc_info.value.task_title == "Fetching beautiful image"
        assert workspace_entries(test_settings) == []

    @pytest.mark.asyncio
    async def test_caller_workspace_is_kept(self, pipeline, test_settings, tmp_path):
        workspace = tmp_path / "mine"
        workspace.mkdir()

        ctx = await pipeline.run(make_request(tmp_path, copy_to_clipboard=True), SETTINGS, workspace)

        assert ctx.workspace == workspace
        assert workspace.is_dir()

    @pytest.mark.asyncio
    async def test_bad_range_fails_in_processing(self, pipeline, mock_renderer, tmp_path):
        with pytest.raises(InputError) as exc_info:
            await pipeline.run(make_request(tmp_path, start=5, end=2), SETTINGS)

        assert exc_info.value.task_title == "Processing snippet.py"
        mock_renderer.render.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_on_processed_runs_after_processing(self, pipeline, tmp_path):
        on_processed = MagicMock()

        ctx = await pipeline.run(make_request(tmp_path), SETTINGS, on_processed=on_processed)

        on_processed.assert_called_once_with()
        assert ctx.url is not None

    @pytest.mark.asyncio
    async def test_on_processed_skipped_on_bad_range(self, pipeline, tmp_path):
        on_processed = MagicMock()

        with pytest.raises(InputError):
            await pipeline.run(
                make_request(tmp_path, start=5, end=2), SETTINGS, on_processed=on_processed
            )

        on_processed.assert_not_called()

    @pytest.mark.asyncio
    async def test_carbonize_shortcut(
        self, test_settings, mock_renderer, mock_clipboard, mock_browser_opener, tmp_path
    ):
        ctx = await carbonize(
            make_request(tmp_path, open_in_browser=True),
            SETTINGS,
            renderer=mock_renderer,
            clipboard=mock_clipboard,
            browser_opener=mock_browser_opener,
        )
        mock_browser_opener.assert_called_once_with(ctx.url)

"""
Carbon Pipeline
===============

The five stages shared by the CLI and the HTTP service:

1. Processing: select the line range and encode it
2. Preparing connection: attach runtime fields and build the Carbon URL
3. Opening in browser (only with ``open_in_browser``)
4. Fetching beautiful image (unless ``open_in_browser``)
5. Copying image to clipboard (only with ``copy_to_clipboard``)

Each run owns one workspace, removed when the run ends.
"""

import asyncio
import secrets
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional

from carbon_now.config.logging import get_logger
from carbon_now.config.settings import get_settings
from carbon_now.core.clipboard import Clipboard
from carbon_now.core.content import encode_content
from carbon_now.core.language import get_language
from carbon_now.core.pipeline.engine import Task, TaskReporter, TaskRunner
from carbon_now.core.rendering.invocation import RenderInvocation
from carbon_now.core.rendering.workspace import workspace_scope
from carbon_now.core.request_url import build_request_url
from carbon_now.models.schemas import CarbonizeRequest, CarbonSettings

logger = get_logger(__name__)

NAME_ALPHABET = "123456abcdef"
NAME_ID_LENGTH = 10

BrowserOpener = Callable[[str], Any]
SettingsCommit = Callable[[], Any]


def generate_name_id(size: int = NAME_ID_LENGTH) -> str:
    return "".join(secrets.choice(NAME_ALPHABET) for _ in range(size))


def output_base_name(request: CarbonizeRequest) -> str:
    """``--target`` if given, else ``<source basename>-<random id>``."""
    if request.target:
        return request.target
    stem = Path(request.file_name).stem if request.file_name else "stdin"
    return f"{stem}-{generate_name_id()}"


@dataclass
class PipelineContext:
    """State shared by the stages of one run."""

    request: CarbonizeRequest
    settings: CarbonSettings
    base_url: str
    workspace: Optional[Path] = None
    url_encoded_content: Optional[str] = None
    url: Optional[str] = None
    downloaded_as: Optional[Path] = None
    on_processed: Optional[SettingsCommit] = None


class CarbonPipeline:
    """Builds and runs the Carbon stages for one request at a time."""

    def __init__(
        self,
        renderer: Optional[RenderInvocation] = None,
        clipboard: Optional[Clipboard] = None,
        browser_opener: Optional[BrowserOpener] = None,
        reporter: Optional[TaskReporter] = None,
        base_url: Optional[str] = None,
        workspace_root: Optional[Path] = None,
    ):
        settings = get_settings()
        self.renderer = renderer or RenderInvocation()
        self.clipboard = clipboard or Clipboard()
        self.browser_opener = browser_opener or webbrowser.open
        self.reporter = reporter
        self.base_url = base_url or settings.carbon_url
        self.workspace_root = Path(workspace_root or settings.workspace_root)
        self.logger: Any = logger.bind(component="carbon_pipeline")

    def build_tasks(self, request: CarbonizeRequest) -> List[Task[PipelineContext]]:
        return [
            Task(title=f"Processing {request.file_name or 'stdin'}", action=self._process),
            Task(title="Preparing connection", action=self._prepare_connection),
            Task(
                title="Opening in browser",
                action=self._open_in_browser,
                skip=lambda ctx: not ctx.request.open_in_browser,
            ),
            Task(
                title="Fetching beautiful image",
                action=self._fetch_image,
                skip=lambda ctx: ctx.request.open_in_browser,
            ),
            Task(
                title="Copying image to clipboard",
                action=self._copy_to_clipboard,
                skip=lambda ctx: not ctx.request.copy_to_clipboard or ctx.request.open_in_browser,
            ),
        ]

    async def run(
        self,
        request: CarbonizeRequest,
        settings: CarbonSettings,
        workspace: Optional[Path] = None,
        on_processed: Optional[SettingsCommit] = None,
    ) -> PipelineContext:
        """
        Run all stages for ``request``.

        Args:
            request: Input text and run options
            settings: Resolved settings, without runtime fields
            workspace: Existing workspace owned by the caller; when None a new
                one is created under ``workspace_root`` and removed afterwards
            on_processed: Called once the input has been processed, before the
                URL is built; the CLI persists its settings here

        Returns:
            The final context; ``downloaded_as`` holds the image path unless
            the browser was opened instead
        """
        runner = TaskRunner(self.build_tasks(request), reporter=self.reporter)

        if workspace is not None:
            context = PipelineContext(
                request,
                settings,
                self.base_url,
                workspace=Path(workspace),
                on_processed=on_processed,
            )
            return await runner.run(context)

        async with workspace_scope(self.workspace_root) as scoped:
            context = PipelineContext(
                request, settings, self.base_url, workspace=scoped, on_processed=on_processed
            )
            return await runner.run(context)

    async def _process(self, ctx: PipelineContext) -> None:
        ctx.url_encoded_content = encode_content(
            ctx.request.input_text, ctx.request.start, ctx.request.end
        )

    async def _prepare_connection(self, ctx: PipelineContext) -> None:
        if ctx.on_processed is not None:
            ctx.on_processed()
        ctx.settings = ctx.settings.with_runtime(
            code=ctx.url_encoded_content or "",
            language=get_language(ctx.request.file_name),
        )
        ctx.url = build_request_url(ctx.base_url, ctx.settings)
        self.logger.debug("Request URL prepared", url_length=len(ctx.url))

    async def _open_in_browser(self, ctx: PipelineContext) -> None:
        opened = await asyncio.to_thread(self.browser_opener, ctx.url)
        if opened is False:
            self.logger.warning("Browser could not be opened", url=ctx.url)

    async def _fetch_image(self, ctx: PipelineContext) -> None:
        image_kind = ctx.settings.image_type
        final_path = None
        if not ctx.request.copy_to_clipboard:
            final_path = ctx.request.location / f"{output_base_name(ctx.request)}.{image_kind}"

        ctx.downloaded_as = await self.renderer.render(
            ctx.url,
            ctx.workspace,
            image_kind,
            final_path=final_path,
            headless=ctx.request.headless,
        )

    async def _copy_to_clipboard(self, ctx: PipelineContext) -> None:
        await self.clipboard.copy_image(ctx.downloaded_as)


async def carbonize(
    request: CarbonizeRequest,
    settings: CarbonSettings,
    workspace: Optional[Path] = None,
    **pipeline_options: Any,
) -> PipelineContext:
    """Run the Carbon pipeline once; see ``CarbonPipeline`` for the options."""
    return await CarbonPipeline(**pipeline_options).run(request, settings, workspace=workspace)

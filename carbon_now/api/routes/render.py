"""
Render Routes
=============

``POST /api/v1.0/carbonize``: one isolated pipeline run per request.

The request's workspace holds the submitted source and the rendered image and
is removed before the response is sent, on success and on failure.
"""

import asyncio
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from carbon_now.api.dependencies import get_current_settings, get_pipeline, get_resolver
from carbon_now.config.defaults import DEFAULT_SETTINGS
from carbon_now.config.logging import get_logger
from carbon_now.config.settings import Settings
from carbon_now.core.exceptions import CarbonNowError, FileSystemError
from carbon_now.core.pipeline.carbon import CarbonPipeline
from carbon_now.core.presets.resolver import SettingsResolver
from carbon_now.core.rendering.workspace import workspace_scope
from carbon_now.models.schemas import CarbonizeRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1.0", tags=["Rendering"])

REFERENCE_SOURCE = Path(__file__).resolve().parents[2] / "reference_snippet.js"
SOURCE_FILE_NAME = "source.txt"
IMAGE_NAME = "image"
IMAGE_TYPE = "png"


async def read_text_field(request: Request) -> Optional[str]:
    """Extract ``text`` from a JSON, form or plain-text body."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    text = None
    if content_type == "application/json":
        body = await request.json()
        text = body.get("text") if isinstance(body, dict) else body
    elif content_type in ("application/x-www-form-urlencoded", "multipart/form-data"):
        form = await request.form()
        text = form.get("text")
    elif content_type.startswith("text/"):
        text = (await request.body()).decode("utf-8")

    if isinstance(text, str) and text.strip():
        return text
    return None


@router.post("/carbonize")
async def carbonize(
    request: Request,
    settings: Settings = Depends(get_current_settings),
    pipeline: CarbonPipeline = Depends(get_pipeline),
    resolver: SettingsResolver = Depends(get_resolver),
) -> Response:
    """Render the submitted snippet (or the reference source) and return the PNG."""
    try:
        text = await read_text_field(request)
        carbon_settings = resolver.resolve(
            DEFAULT_SETTINGS, settings.server_preset, None, {"type": IMAGE_TYPE}, read_only=True
        )

        async with workspace_scope(settings.workspace_root) as workspace:
            if text is not None:
                source = workspace / SOURCE_FILE_NAME
                await asyncio.to_thread(source.write_text, text, encoding="utf-8")
            else:
                source = REFERENCE_SOURCE

            run_request = CarbonizeRequest(
                input_text=await asyncio.to_thread(source.read_text, encoding="utf-8"),
                file_name=str(source),
                location=workspace,
                target=IMAGE_NAME,
                headless=settings.playwright_headless,
            )
            logger.info(
                "Carbonize started", workspace=workspace.name, submitted=text is not None
            )

            ctx = await pipeline.run(run_request, carbon_settings, workspace=workspace)
            try:
                image = await asyncio.to_thread(ctx.downloaded_as.read_bytes)
            except OSError as e:
                raise FileSystemError(f"Could not read rendered image: {e}")
    except CarbonNowError:
        raise
    except Exception as e:
        logger.error("Carbonize failed unexpectedly", error=str(e))
        raise CarbonNowError(f"Carbonize failed: {e}") from e

    logger.info("Carbonize completed", size=len(image))
    return Response(
        content=image,
        media_type="image/png",
        headers={"Content-Disposition": f"attachment; filename={IMAGE_NAME}.{IMAGE_TYPE}"},
    )

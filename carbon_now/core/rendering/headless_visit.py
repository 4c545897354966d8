"""
Headless Renderer
=================

Playwright-based renderer process. Visits a Carbon URL, triggers Carbon's own
export and stores the result as ``<location>/carbon.<type>``.

Run as ``python -m carbon_now.core.rendering.headless_visit`` (or
``carbon-now-render``). Reports on stdout with the success marker and a
``CARBON_NOW_STATUS`` JSON line; exits non-zero on failure.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from playwright.async_api import Browser, Page, async_playwright

from carbon_now.config.defaults import IMAGE_TYPES
from carbon_now.config.logging import get_logger, setup_logging
from carbon_now.config.settings import get_settings
from carbon_now.core.rendering.invocation import (
    ARTIFACT_STEM,
    STATUS_PREFIX,
    SUCCESS_MARKER,
)

logger = get_logger(__name__)

EXPORT_MENU = "#export-menu"
EXPORT_BUTTONS = {"png": "#export-png", "svg": "#export-svg"}
DOWNLOAD_POLL_INTERVAL = 0.25


class CarbonExportError(Exception):
    """Exception raised when Carbon does not deliver an export."""

    pass


class HeadlessVisit:
    """Single-shot Carbon export."""

    def __init__(self, timeout_ms: Optional[int] = None, show_browser: bool = False):
        settings = get_settings()
        self.timeout_ms = timeout_ms or settings.playwright_timeout
        self.show_browser = show_browser or not settings.playwright_headless
        self.logger: Any = logger.bind(component="headless_visit")

    async def run(self, url: str, location: Path, image_type: str, headless: bool) -> Path:
        """
        Export one image.

        Args:
            url: Carbon URL carrying code and settings
            location: Directory to store the image in
            image_type: ``png`` or ``svg``
            headless: Use only standard Playwright download handling; when False
                the experimental CDP download behaviour writes straight to disk

        Returns:
            Path of the stored image
        """
        target = location / f"{ARTIFACT_STEM}.{image_type}"

        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=not self.show_browser,
                args=[
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--disable-dev-shm-usage",
                ],
            )
            try:
                if headless:
                    await self._export_with_download(browser, url, image_type, target)
                else:
                    await self._export_with_cdp(browser, url, image_type, location, target)
            finally:
                await browser.close()

        self.logger.info("Carbon export stored", path=str(target))
        return target

    async def _open(self, browser: Browser, url: str) -> Page:
        context = await browser.new_context(accept_downloads=True)
        page = await context.new_page()
        page.set_default_timeout(self.timeout_ms)
        await page.goto(url, wait_until="networkidle")
        await page.click(EXPORT_MENU)
        return page

    async def _export_with_download(
        self, browser: Browser, url: str, image_type: str, target: Path
    ) -> None:
        page = await self._open(browser, url)
        async with page.expect_download() as download_info:
            await page.click(EXPORT_BUTTONS[image_type])
        download = await download_info.value

        failure = await download.failure()
        if failure:
            raise CarbonExportError(f"Download failed: {failure}")
        await download.save_as(str(target))

    async def _export_with_cdp(
        self, browser: Browser, url: str, image_type: str, location: Path, target: Path
    ) -> None:
        page = await self._open(browser, url)
        session = await page.context.new_cdp_session(page)
        await session.send(
            "Browser.setDownloadBehavior",
            {"behavior": "allow", "downloadPath": str(location)},
        )
        await page.click(EXPORT_BUTTONS[image_type])

        # Carbon names its downloads carbon.<type>, which is the target name
        deadline = asyncio.get_running_loop().time() + self.timeout_ms / 1000
        while not target.is_file():
            if asyncio.get_running_loop().time() > deadline:
                raise CarbonExportError(f"No download appeared in {location}")
            await asyncio.sleep(DOWNLOAD_POLL_INTERVAL)


def report(status: Dict[str, Any]) -> None:
    print(f"{STATUS_PREFIX}{json.dumps(status)}", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export a Carbon image with Playwright")
    parser.add_argument("--url", required=True, help="Carbon URL to visit")
    parser.add_argument("--location", required=True, help="Directory to store the image in")
    parser.add_argument("--type", choices=IMAGE_TYPES, default="png", help="Image type")
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Use only non-experimental Playwright features",
    )
    parser.add_argument("--timeout", type=int, default=None, help="Timeout in milliseconds")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Renderer entry point."""
    args = build_parser().parse_args(argv)
    setup_logging()

    location = Path(args.location)
    if not location.is_dir():
        print(f"Location {location} is not a directory", file=sys.stderr)
        report({"status": "error", "error": "location missing"})
        return 1

    try:
        path = asyncio.run(
            HeadlessVisit(timeout_ms=args.timeout).run(args.url, location, args.type, args.headless)
        )
    except Exception as e:
        logger.error("Carbon export failed", error=str(e))
        print(f"Carbon export failed: {e}", file=sys.stderr)
        report({"status": "error", "error": str(e)})
        return 1

    print(f"{SUCCESS_MARKER}: {path}", flush=True)
    report({"status": "ok", "path": str(path)})
    return 0


if __name__ == "__main__":
    sys.exit(main())

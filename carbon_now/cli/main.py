"""
carbon-now CLI
==============

Usage:
    carbon-now <file>
    pbpaste | carbon-now
    carbon-now --from-clipboard
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from pydantic import ValidationError

from carbon_now.config.defaults import DEFAULT_SETTINGS, LATEST_PRESET
from carbon_now.config.logging import get_logger, setup_logging
from carbon_now.config.settings import get_settings
from carbon_now.core.exceptions import CarbonNowError
from carbon_now.core.input_source import get_input
from carbon_now.core.pipeline.carbon import CarbonPipeline, PipelineContext
from carbon_now.core.presets.resolver import SettingsResolver
from carbon_now.core.presets.store import PresetStore
from carbon_now.models.schemas import CarbonizeRequest

logger = get_logger(__name__)

USAGE = """
  Usage
    $ carbon-now <file>
    $ pbpaste | carbon-now
    $ carbon-now --from-clipboard
"""

FAILURE_HINTS = """
  Error: Sending code to {carbon_url} went wrong.

  This is mostly due to:

  - Nonsensical input like `--start 10 --end 2`
  - Carbon being down or taking too long to respond
  - Your internet connection not working or being too slow

  Additional info:

  {error}
"""


class ConsoleReporter:
    """Prints pipeline progress to stderr."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stderr

    def task_started(self, title: str) -> None:
        print(f"  > {title}", file=self.stream)

    def task_completed(self, title: str) -> None:
        print(f"  ✔ {title}", file=self.stream)

    def task_failed(self, title: str, error: BaseException) -> None:
        print(f"  ✖ {title}", file=self.stream)


def build_parser() -> argparse.ArgumentParser:
    # -h is taken by --headless, so help is only available as --help
    parser = argparse.ArgumentParser(
        prog="carbon-now",
        description="Beautiful images of your code, from right inside your terminal.",
        add_help=False,
    )
    parser.add_argument("file", nargs="?", help="Source file; omit to read stdin")
    parser.add_argument("-s", "--start", type=int, default=1, help="Starting line of <file>")
    parser.add_argument("-e", "--end", type=int, default=1000, help="Ending line of <file>")
    parser.add_argument("-i", "--interactive", action="store_true", help="Interactive mode")
    parser.add_argument("-l", "--location", default=None, help="Image save location, default: cwd")
    parser.add_argument(
        "-t", "--target", default=None, help="Image name, default: original-hash.{png|svg}"
    )
    parser.add_argument(
        "-o", "--open", action="store_true", help="Open in browser instead of saving"
    )
    parser.add_argument("-c", "--copy", action="store_true", help="Copy image to clipboard")
    parser.add_argument("-p", "--preset", default=LATEST_PRESET, help="Use a saved preset")
    parser.add_argument(
        "-h",
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Use only non-experimental Playwright features",
    )
    parser.add_argument("--config", default=None, help="Use a different, local config (read-only)")
    parser.add_argument(
        "--from-clipboard",
        action="store_true",
        help="Read input from clipboard instead of file",
    )
    parser.add_argument("--help", action="help", help="Show this message and exit")
    return parser


def report_success(ctx: PipelineContext) -> None:
    print("\n  Done!")
    if ctx.request.open_in_browser:
        print("\n  Browser opened, finish your image there! 😌")
    elif ctx.request.copy_to_clipboard:
        print("\n  Image copied to clipboard! 😌")
    else:
        print(f"\n  The file can be found here: {ctx.downloaded_as} 😌")


def main(
    argv: Optional[List[str]] = None,
    pipeline: Optional[CarbonPipeline] = None,
    stdin: Optional[TextIO] = None,
) -> int:
    """CLI entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    if args.interactive and not (sys.stdin and sys.stdin.isatty()):
        print(f"\n  Interactive mode needs a terminal on stdin\n{USAGE}", file=sys.stderr)
        return 1

    try:
        text = asyncio.run(get_input(args.file, args.from_clipboard, stdin=stdin))
    except CarbonNowError as e:
        print(f"\n  {e}\n{USAGE}", file=sys.stderr)
        return 1

    try:
        request = CarbonizeRequest(
            input_text=text,
            file_name=args.file,
            start=args.start,
            end=args.end,
            open_in_browser=args.open,
            copy_to_clipboard=args.copy,
            location=Path(args.location) if args.location else Path.cwd(),
            target=args.target,
            headless=args.headless,
        )
    except ValidationError as e:
        print(f"\n  Invalid arguments: {e}\n{USAGE}", file=sys.stderr)
        return 1

    resolver = SettingsResolver(PresetStore(settings.config_path))
    try:
        overrides = None
        if args.interactive:
            from carbon_now.cli.interactive import collect_overrides

            current = resolver.resolve(
                DEFAULT_SETTINGS, args.preset, args.config, read_only=True
            )
            overrides = collect_overrides(current.as_dict())
        effective = resolver.resolve(
            DEFAULT_SETTINGS, args.preset, args.config, overrides, defer_save=True
        )
    except CarbonNowError as e:
        print(f"\n  {e}\n{USAGE}", file=sys.stderr)
        return 1

    pipeline = pipeline or CarbonPipeline(reporter=ConsoleReporter())
    try:
        ctx = asyncio.run(pipeline.run(request, effective, on_processed=resolver.commit))
    except Exception as e:
        logger.error("Pipeline failed", error=str(e), task=getattr(e, "task_title", None))
        print(FAILURE_HINTS.format(carbon_url=pipeline.base_url, error=e), file=sys.stderr)
        return 1

    report_success(ctx)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()

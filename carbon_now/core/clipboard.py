"""
Clipboard
=========

Thin async wrapper around the platform clipboard commands.
"""

import asyncio
import os
import shutil
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from carbon_now.config.logging import get_logger
from carbon_now.core.exceptions import ClipboardError

logger = get_logger(__name__)

MIME_TYPES = {".png": "image/png", ".svg": "image/svg+xml"}


class Clipboard:
    """Read text from and put images on the system clipboard."""

    def __init__(self, platform: Optional[str] = None):
        self.platform = platform or sys.platform
        self.logger: Any = logger.bind(component="clipboard", platform=self.platform)

    async def read_text(self) -> str:
        if self.platform == "darwin":
            argv = ["pbpaste"]
        elif self.platform.startswith("win"):
            argv = ["powershell", "-NoProfile", "-Command", "Get-Clipboard -Raw"]
        elif os.environ.get("WAYLAND_DISPLAY"):
            argv = ["wl-paste", "--no-newline"]
        else:
            argv = ["xclip", "-selection", "clipboard", "-o"]

        stdout = await self._run(argv)
        return stdout.decode("utf-8", errors="replace")

    async def copy_image(self, path: Path) -> None:
        path = Path(path).resolve()
        mime = MIME_TYPES.get(path.suffix.lower(), "image/png")

        if self.platform == "darwin":
            if mime == "image/png":
                script = f'set the clipboard to (read (POSIX file "{path}") as «class PNGf»)'
                await self._run(["osascript", "-e", script])
            else:
                await self._run(["pbcopy"], stdin=path.read_bytes())
        elif self.platform.startswith("win"):
            script = (
                "Add-Type -AssemblyName System.Windows.Forms, System.Drawing; "
                f"[System.Windows.Forms.Clipboard]::SetImage([System.Drawing.Image]::FromFile('{path}'))"
            )
            await self._run(["powershell", "-NoProfile", "-STA", "-Command", script])
        elif os.environ.get("WAYLAND_DISPLAY"):
            await self._run(["wl-copy", "--type", mime], stdin=path.read_bytes())
        else:
            await self._run(["xclip", "-selection", "clipboard", "-t", mime, "-i", str(path)])

        self.logger.info("Image copied to clipboard", path=str(path), mime=mime)

    async def _run(self, argv: Sequence[str], stdin: Optional[bytes] = None) -> bytes:
        command: List[str] = list(argv)
        if shutil.which(command[0]) is None:
            raise ClipboardError(f"Clipboard command not available: {command[0]}")

        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate(stdin)
        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise ClipboardError(f"{command[0]} failed: {message or process.returncode}")
        return stdout

"""
Input Source
============

Finds the text to render: a file, piped stdin, or the clipboard.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional, TextIO

from carbon_now.core.clipboard import Clipboard
from carbon_now.core.exceptions import ClipboardError, InputError


async def get_input(
    file: Optional[str] = None,
    from_clipboard: bool = False,
    stdin: Optional[TextIO] = None,
    clipboard: Optional[Clipboard] = None,
) -> str:
    """
    Return the source text.

    Raises:
        InputError: If no source is reachable or it is empty
    """
    if file:
        path = Path(file)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            raise InputError(f"File not found: {file}")
        except (OSError, UnicodeDecodeError) as e:
            raise InputError(f"Could not read {file}: {e}")

    if from_clipboard:
        try:
            text = await (clipboard or Clipboard()).read_text()
        except ClipboardError as e:
            raise InputError(f"Could not read the clipboard: {e}")
        if not text.strip():
            raise InputError("Clipboard is empty")
        return text

    stream = stdin if stdin is not None else sys.stdin
    if stream is None or stream.isatty():
        raise InputError("No file given and nothing piped to stdin")

    text = await asyncio.to_thread(stream.read)
    if not text.strip():
        raise InputError("stdin is empty")
    return text

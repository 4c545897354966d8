"""
Test Helpers
============

Helper functions for common testing operations.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List
from urllib.parse import parse_qs, urlsplit

from carbon_now.config.settings import Settings


def workspace_entries(settings: Settings) -> List[Path]:
    """Everything currently left under the workspace root."""
    root = Path(settings.workspace_root)
    return list(root.iterdir()) if root.exists() else []


def read_renderer_calls(log: Path) -> List[List[str]]:
    """Argument vectors the fake renderer was started with, oldest first."""
    if not log.exists():
        return []
    return [json.loads(line) for line in log.read_text(encoding="utf-8").splitlines() if line]


def argv_value(argv: List[str], flag: str) -> str:
    return argv[argv.index(flag) + 1]


def query_of(url: str) -> Dict[str, Any]:
    """Single-valued query parameters of a Carbon URL, decoded once."""
    return {key: values[0] for key, values in parse_qs(urlsplit(url).query).items()}


async def wait_for_file(path: Path, timeout: float = 10.0, interval: float = 0.05) -> None:
    """Wait until ``path`` exists."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not path.exists():
        if loop.time() > deadline:
            raise TimeoutError(f"{path} did not appear within {timeout}s")
        await asyncio.sleep(interval)


def process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True

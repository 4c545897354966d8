"""
Workspaces
==========

Every pipeline run gets its own freshly created directory, named by a random
UUID, which is removed when the run ends, whatever the outcome.
"""

import asyncio
import re
import shutil
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from carbon_now.config.logging import get_logger
from carbon_now.core.exceptions import FileSystemError

logger = get_logger(__name__)

WORKSPACE_NAME = re.compile(r"[0-9a-f]{32}")


def new_workspace_id() -> str:
    return uuid.uuid4().hex


async def create_workspace(root: Path) -> Path:
    """Create and return a new, empty workspace under ``root``."""
    path = Path(root) / new_workspace_id()
    try:
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=False)
    except OSError as e:
        raise FileSystemError(f"Could not create workspace {path}: {e}")
    logger.debug("Workspace created", workspace=str(path))
    return path


async def remove_workspace(path: Path) -> bool:
    """
    Delete a workspace and everything in it.

    Failures are logged and reported as False, never raised.
    """
    try:
        await asyncio.to_thread(shutil.rmtree, path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning("Workspace cleanup failed", workspace=str(path), error=str(e))
        return False
    logger.debug("Workspace removed", workspace=str(path))
    return True


@asynccontextmanager
async def workspace_scope(root: Path) -> AsyncGenerator[Path, None]:
    """Yield a new workspace; remove it on every exit path."""
    path = await create_workspace(root)
    try:
        yield path
    finally:
        await remove_workspace(path)


def count_workspaces(root: Path) -> int:
    """Live workspaces under ``root``; other entries sharing the directory are ignored."""
    root = Path(root)
    if not root.is_dir():
        return 0
    return sum(
        1 for entry in root.iterdir() if entry.is_dir() and WORKSPACE_NAME.fullmatch(entry.name)
    )

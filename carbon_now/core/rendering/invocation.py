"""
Renderer Invocation
===================

Runs the renderer as a single-shot subprocess inside a workspace and decides
whether it succeeded.

Protocol: the renderer is called with ``--url``, ``--location``, ``--type``
and ``--headless``/``--no-headless`` and is expected to leave
``<location>/carbon.<type>`` behind. Success is read from its stdout: a
``CARBON_NOW_STATUS {json}`` line when present, otherwise the presence of
the success marker. The exit code alone is never enough.
"""

import asyncio
import json
import shlex
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from carbon_now.config.logging import get_logger
from carbon_now.config.settings import get_settings
from carbon_now.core.exceptions import FileSystemError, RenderFailure, RenderTimeout
from carbon_now.models.schemas import RenderRecord

logger = get_logger(__name__)

SUCCESS_MARKER = "The file can be found here"
STATUS_PREFIX = "CARBON_NOW_STATUS "
ARTIFACT_STEM = "carbon"

DEFAULT_RENDERER_COMMAND = (sys.executable, "-m", "carbon_now.core.rendering.headless_visit")


def artifact_path(workspace: Path, image_kind: str) -> Path:
    """Where the renderer leaves its output for ``image_kind``."""
    return Path(workspace) / f"{ARTIFACT_STEM}.{image_kind}"


def parse_status_line(stdout: str) -> Optional[Dict[str, Any]]:
    """Return the last well-formed status line in ``stdout``, if any."""
    status = None
    for line in stdout.splitlines():
        if not line.startswith(STATUS_PREFIX):
            continue
        try:
            parsed = json.loads(line[len(STATUS_PREFIX) :])
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            status = parsed
    return status


def is_success(record: RenderRecord) -> bool:
    """Classify a finished renderer run."""
    if record.status is not None:
        return record.status.get("status") == "ok" and record.returncode == 0
    return SUCCESS_MARKER in record.stdout


class RenderInvocation:
    """Drives one renderer subprocess per call."""

    def __init__(
        self,
        command: Optional[Sequence[str]] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        if command is None and settings.renderer_command:
            command = shlex.split(settings.renderer_command)
        self.command: List[str] = list(command or DEFAULT_RENDERER_COMMAND)
        self.timeout = timeout if timeout is not None else settings.render_timeout
        self.logger: Any = logger.bind(component="render_invocation")

    def build_argv(
        self, url: str, workspace: Path, image_kind: str, headless: bool = True
    ) -> List[str]:
        return [
            *self.command,
            "--url",
            url,
            "--location",
            str(workspace),
            "--type",
            image_kind,
            "--headless" if headless else "--no-headless",
        ]

    async def invoke(self, argv: Sequence[str]) -> RenderRecord:
        """
        Spawn the renderer and wait for it, capturing stdout and stderr in full.

        Raises:
            RenderTimeout: If it runs longer than ``self.timeout``; the process is killed
            RenderFailure: If it cannot be started
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise RenderFailure(f"Renderer could not be started: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            self.logger.error("Renderer timed out", timeout=self.timeout, pid=process.pid)
            await self._terminate(process)
            raise RenderTimeout(f"Renderer did not finish within {self.timeout:g} seconds")
        except BaseException:
            # Cancelled or interrupted: the renderer must not outlive its workspace
            self.logger.warning("Renderer interrupted", pid=process.pid)
            await self._terminate(process)
            raise

        stdout_text = stdout.decode("utf-8", errors="replace")
        return RenderRecord(
            argv=list(argv),
            stdout=stdout_text,
            stderr=stderr.decode("utf-8", errors="replace"),
            returncode=process.returncode,
            status=parse_status_line(stdout_text),
        )

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """Kill ``process`` if it is still running and reap it."""
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

    async def render(
        self,
        url: str,
        workspace: Path,
        image_kind: str = "png",
        final_path: Optional[Path] = None,
        headless: bool = True,
    ) -> Path:
        """
        Render ``url`` into ``workspace`` and return the artifact path.

        Args:
            url: Fully formed Carbon request URL
            workspace: Directory owned by the current run
            image_kind: ``png`` or ``svg``
            final_path: Move the artifact here; otherwise it stays in the workspace
            headless: Restrict the renderer to non-experimental browser features

        Raises:
            RenderFailure: If the renderer did not report success
            RenderTimeout: If the renderer ran out of time
            FileSystemError: If the artifact is missing or cannot be moved
        """
        argv = self.build_argv(url, workspace, image_kind, headless)
        self.logger.info("Invoking renderer", workspace=str(workspace), image_kind=image_kind)

        record = await self.invoke(argv)
        if not is_success(record):
            self.logger.error(
                "Renderer reported failure",
                returncode=record.returncode,
                diagnostics=record.diagnostics[:500],
            )
            raise RenderFailure(record.diagnostics or "Renderer produced no output", record)

        artifact = artifact_path(workspace, image_kind)
        if not artifact.is_file():
            raise FileSystemError(f"Renderer reported success but {artifact} does not exist")

        if final_path is None:
            return artifact

        final_path = Path(final_path)
        try:
            await asyncio.to_thread(final_path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(shutil.move, str(artifact), str(final_path))
        except OSError as e:
            raise FileSystemError(f"Could not move {artifact} to {final_path}: {e}")

        self.logger.info("Artifact saved", path=str(final_path))
        return final_path

"""
Exceptions
==========

Error taxonomy shared by the pipeline, the CLI and the HTTP service.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from carbon_now.models.schemas import RenderRecord


class CarbonNowError(Exception):
    """Base class for all carbon-now errors."""

    error_code = "CARBON_NOW_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        # Set by the task runner when the error escapes a pipeline stage
        self.task_title: Optional[str] = None


class InputError(CarbonNowError):
    """No usable source text: missing file, empty stdin, empty clipboard, bad range."""

    error_code = "INPUT_ERROR"


class ConfigNotFound(CarbonNowError):
    """A requested preset or configuration file does not exist."""

    error_code = "CONFIG_NOT_FOUND"


class RenderFailure(CarbonNowError):
    """The renderer did not report success."""

    error_code = "RENDER_FAILURE"

    def __init__(self, message: str, record: Optional["RenderRecord"] = None):
        super().__init__(message)
        self.record = record


class RenderTimeout(CarbonNowError):
    """The renderer did not finish within the configured timeout."""

    error_code = "RENDER_TIMEOUT"


class FileSystemError(CarbonNowError):
    """Workspace creation, artifact lookup, read or move failed."""

    error_code = "FILESYSTEM_ERROR"


class ClipboardError(CarbonNowError):
    """The platform clipboard could not be read or written."""

    error_code = "CLIPBOARD_ERROR"

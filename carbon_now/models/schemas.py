"""
Pydantic Models and Schemas
===========================

Core data models for Carbon settings, pipeline requests, renderer invocation
records, and API responses.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carbon_now.config.defaults import (
    CODE_KEY,
    IMAGE_TYPES,
    LANGUAGE_KEY,
    RUNTIME_KEYS,
    SAVE_AS_KEY,
)


class CarbonSettings(BaseModel):
    """
    Effective Carbon options for one run.

    Immutable: every merge returns a new instance. The runtime-only fields
    (``code`` and ``language``) are attached last and never persisted.
    """

    model_config = ConfigDict(frozen=True)

    options: Dict[str, Any] = Field(default_factory=dict, description="Ordered Carbon options")
    code: Optional[str] = Field(default=None, description="URL-encoded snippet")
    language: Optional[str] = Field(default=None, description="Carbon language mode")

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]] = None) -> "CarbonSettings":
        return cls(options=dict(mapping or {}))

    def merge(self, overrides: Optional[Mapping[str, Any]]) -> "CarbonSettings":
        """Return a new record with ``overrides`` layered on top (later wins)."""
        if not overrides:
            return self
        return self.model_copy(update={"options": {**self.options, **overrides}})

    def without(self, *keys: str) -> "CarbonSettings":
        return self.model_copy(
            update={"options": {k: v for k, v in self.options.items() if k not in keys}}
        )

    def with_runtime(self, code: str, language: str) -> "CarbonSettings":
        return self.model_copy(update={"code": code, "language": language})

    def persistable(self) -> Dict[str, Any]:
        """Options as they may be written to the preset store."""
        excluded = RUNTIME_KEYS | {SAVE_AS_KEY}
        return {k: v for k, v in self.options.items() if k not in excluded}

    def query_params(self) -> Dict[str, Any]:
        """Options plus runtime fields, as sent to Carbon."""
        params = dict(self.options)
        if self.code is not None:
            params[CODE_KEY] = self.code
        if self.language is not None:
            params[LANGUAGE_KEY] = self.language
        return params

    @property
    def image_type(self) -> str:
        image_type = str(self.options.get("type", "png")).lower()
        return image_type if image_type in IMAGE_TYPES else "png"

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.options)

    def get(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.options[key]

    def __contains__(self, key: object) -> bool:
        return key in self.options


class CarbonizeRequest(BaseModel):
    """Options for a single pipeline run, shared by the CLI and the HTTP service."""

    input_text: str = Field(..., description="Raw source text")
    file_name: Optional[str] = Field(default=None, description="Source file, None for stdin")
    start: int = Field(default=1, description="First line to include")
    end: int = Field(default=1000, description="Last line to include")
    open_in_browser: bool = Field(default=False, description="Open Carbon instead of downloading")
    copy_to_clipboard: bool = Field(default=False, description="Copy image instead of saving")
    location: Path = Field(default_factory=Path.cwd, description="Save directory")
    target: Optional[str] = Field(default=None, description="Output base name")
    headless: bool = Field(default=True, description="Non-experimental browser features only")

    @field_validator("start", "end")
    @classmethod
    def validate_line(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Line numbers start at 1")
        return v


class RenderRecord(BaseModel):
    """Captured result of one renderer subprocess."""

    argv: List[str] = Field(default_factory=list, description="Exact command issued")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")
    returncode: Optional[int] = Field(default=None, description="Exit status")
    status: Optional[Dict[str, Any]] = Field(
        default=None, description="Structured status line, if the renderer emitted one"
    )

    @property
    def diagnostics(self) -> str:
        return self.stderr.strip() or self.stdout.strip()


class ErrorResponse(BaseModel):
    """Error body returned by the HTTP service."""

    error: str = Field(..., description="Error message")
    error_code: str = Field(..., description="Error kind")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Error details")
    request_id: Optional[str] = Field(default=None, description="Request identifier")


class HealthStatus(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    workspace_root: str = Field(..., description="Directory holding per-request workspaces")
    active_workspaces: int = Field(default=0, description="Workspaces currently on disk")

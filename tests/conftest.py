"""
Test Configuration
==================

Pytest configuration shared by unit and integration tests.
Provides isolated settings, a fake renderer command and an HTTP test client.
"""

import sys
from pathlib import Path
from typing import Generator, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from pydantic_settings import SettingsConfigDict

import carbon_now.config.settings as settings_module
from carbon_now.config.settings import Settings
from carbon_now.core.clipboard import Clipboard
from carbon_now.core.rendering.invocation import RenderInvocation

FAKE_RENDERER = Path(__file__).parent / "utils" / "fake_renderer.py"


class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    debug: bool = True
    render_timeout: float = 20.0
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="CARBON_NOW_TEST_")


@pytest.fixture
def test_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestSettings:
    """Settings pointing at a private preset store and workspace root."""
    test_settings = TestSettings(
        config_path=tmp_path / "home" / ".carbon-now.json",
        workspace_root=tmp_path / "workspaces",
    )
    monkeypatch.setattr(settings_module, "settings", test_settings)
    return test_settings


@pytest.fixture
def fake_renderer_command() -> List[str]:
    """Command line of a stand-in renderer that needs no browser."""
    return [sys.executable, str(FAKE_RENDERER)]


@pytest.fixture
def renderer_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """File the fake renderer appends its received arguments to."""
    log = tmp_path / "renderer.log"
    monkeypatch.setenv("FAKE_RENDERER_LOG", str(log))
    return log


@pytest.fixture
def renderer_mode(monkeypatch: pytest.MonkeyPatch):
    """Switch the fake renderer's behaviour for the current test."""

    def set_mode(mode: str) -> None:
        monkeypatch.setenv("FAKE_RENDERER_MODE", mode)

    set_mode("ok")
    return set_mode


@pytest.fixture
def fake_renderer(
    test_settings: TestSettings, fake_renderer_command: List[str], renderer_mode
) -> RenderInvocation:
    return RenderInvocation(command=fake_renderer_command, timeout=test_settings.render_timeout)


@pytest.fixture
def mock_clipboard() -> MagicMock:
    """Clipboard double that records copied images."""
    clipboard = MagicMock(spec=Clipboard)
    clipboard.copied = []

    async def copy_image(path: Path) -> None:
        path = Path(path)
        assert path.is_file(), f"{path} should exist while it is being copied"
        clipboard.copied.append((path, path.read_bytes()))

    clipboard.copy_image = AsyncMock(side_effect=copy_image)
    clipboard.read_text = AsyncMock(return_value="")
    return clipboard


@pytest.fixture
def mock_browser_opener() -> MagicMock:
    return MagicMock(return_value=True)


@pytest.fixture
def client(
    test_settings: TestSettings, fake_renderer: RenderInvocation
) -> Generator[TestClient, None, None]:
    """FastAPI test client wired to the fake renderer."""
    from carbon_now.api.dependencies import get_renderer
    from carbon_now.api.main import create_app

    app = create_app()
    app.dependency_overrides[get_renderer] = lambda: fake_renderer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

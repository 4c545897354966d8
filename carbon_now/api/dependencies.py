"""
API Dependencies
================

FastAPI dependency providers, overridable in tests.
"""

from fastapi import Depends

from carbon_now.config.settings import Settings, get_settings
from carbon_now.core.pipeline.carbon import CarbonPipeline
from carbon_now.core.presets.resolver import SettingsResolver
from carbon_now.core.presets.store import PresetStore
from carbon_now.core.rendering.invocation import RenderInvocation


def get_current_settings() -> Settings:
    """Dependency to get current settings."""
    return get_settings()


def get_renderer(settings: Settings = Depends(get_current_settings)) -> RenderInvocation:
    return RenderInvocation(timeout=settings.render_timeout)


def get_pipeline(
    settings: Settings = Depends(get_current_settings),
    renderer: RenderInvocation = Depends(get_renderer),
) -> CarbonPipeline:
    return CarbonPipeline(
        renderer=renderer,
        base_url=settings.carbon_url,
        workspace_root=settings.workspace_root,
    )


def get_resolver(settings: Settings = Depends(get_current_settings)) -> SettingsResolver:
    """Presets for the service come from a dedicated file if set, else the user store."""
    if settings.server_config_path is not None:
        store = PresetStore(settings.server_config_path, read_only=True)
    else:
        store = PresetStore(settings.config_path)
    return SettingsResolver(store)

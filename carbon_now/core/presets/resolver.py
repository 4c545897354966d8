"""
Settings Resolver
=================

Layers Carbon options, later wins:

    defaults < stored preset < interactive overrides < runtime fields

Runtime fields (encoded code, language) are attached by the pipeline after
resolution, so they never reach the store.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from carbon_now.config.defaults import LATEST_PRESET, SAVE_AS_KEY
from carbon_now.config.logging import get_logger
from carbon_now.core.exceptions import ConfigNotFound
from carbon_now.core.presets.store import PresetStore
from carbon_now.models.schemas import CarbonSettings

logger = get_logger(__name__)


class SettingsResolver:
    """Resolve effective settings against a per-user preset store."""

    def __init__(self, store: PresetStore):
        self.store = store
        self._pending: Optional[Tuple[Optional[str], Dict[str, Any]]] = None
        self.logger: Any = logger.bind(component="settings_resolver")

    def resolve(
        self,
        defaults: Mapping[str, Any],
        preset_name: Optional[str] = LATEST_PRESET,
        local_config_path: Optional[Union[str, Path]] = None,
        interactive_overrides: Optional[Mapping[str, Any]] = None,
        read_only: bool = False,
        defer_save: bool = False,
    ) -> CarbonSettings:
        """
        Merge defaults, one preset and one override set into a new record.

        Args:
            defaults: Base options
            preset_name: Preset to load; ``latest-preset`` loads the last used settings
            local_config_path: Read-only preset file replacing the store as source
            interactive_overrides: Options collected interactively; a ``preset``
                key names a preset to save the result under
            read_only: Never write back, even without a local config
            defer_save: Hold the write back until ``commit`` is called

        Returns:
            Effective settings without runtime fields

        Raises:
            ConfigNotFound: If a named preset does not exist
        """
        source = self.store
        if local_config_path is not None:
            source = PresetStore(Path(local_config_path), read_only=True)
            read_only = True

        settings = CarbonSettings.from_mapping(defaults)
        settings = settings.merge(self._load_preset(source, preset_name))

        overrides = dict(interactive_overrides or {})
        save_as = overrides.pop(SAVE_AS_KEY, None) or None
        settings = settings.merge(overrides)

        self._pending = None
        if not read_only:
            if defer_save:
                self._pending = (save_as, settings.persistable())
            else:
                self.store.save(save_as, settings.persistable())

        self.logger.debug(
            "Settings resolved",
            preset=preset_name,
            local_config=str(local_config_path) if local_config_path else None,
            saved_as=save_as,
            persisted=not read_only and not defer_save,
        )
        return settings.without(SAVE_AS_KEY)

    def commit(self) -> bool:
        """
        Write the settings held back by the last ``resolve(defer_save=True)``.

        Returns False when there is nothing to write.
        """
        if self._pending is None:
            return False
        save_as, values = self._pending
        self._pending = None
        return self.store.save(save_as, values)

    def _load_preset(self, source: PresetStore, preset_name: Optional[str]) -> Mapping[str, Any]:
        if not preset_name:
            return {}

        preset = source.get(preset_name)
        if preset is None:
            if preset_name == LATEST_PRESET:
                # First run, nothing used yet
                return {}
            raise ConfigNotFound(f"Preset '{preset_name}' not found in {source.path}")

        preset.pop(SAVE_AS_KEY, None)
        return preset


def resolve(
    defaults: Mapping[str, Any],
    preset_name: Optional[str],
    local_config_path: Optional[Union[str, Path]],
    interactive_overrides: Optional[Mapping[str, Any]],
    store: PresetStore,
    read_only: bool = False,
) -> CarbonSettings:
    """Functional shortcut for ``SettingsResolver(store).resolve(...)``."""
    return SettingsResolver(store).resolve(
        defaults,
        preset_name=preset_name,
        local_config_path=local_config_path,
        interactive_overrides=interactive_overrides,
        read_only=read_only,
    )

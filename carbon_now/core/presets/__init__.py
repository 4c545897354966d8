"""
Presets
=======

Per-user preset persistence and layered settings resolution.
"""

from carbon_now.core.presets.resolver import SettingsResolver, resolve
from carbon_now.core.presets.store import PresetStore

__all__ = ["PresetStore", "SettingsResolver", "resolve"]

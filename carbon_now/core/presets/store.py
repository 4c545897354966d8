"""
Preset Store
============

JSON file holding named presets plus the ``latest-preset`` record, keyed by
preset name. Writes replace the whole file; concurrent writers are
last-writer-wins.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from carbon_now.config.defaults import LATEST_PRESET
from carbon_now.config.logging import get_logger
from carbon_now.core.exceptions import ConfigNotFound, FileSystemError

logger = get_logger(__name__)


class PresetStore:
    """Read and write presets in a single JSON document."""

    def __init__(self, path: Path, read_only: bool = False):
        self.path = Path(path).expanduser()
        self.read_only = read_only
        self.logger: Any = logger.bind(component="preset_store", path=str(self.path))

    def load_all(self) -> Dict[str, Dict[str, Any]]:
        """
        Load every stored preset.

        A missing per-user store is treated as empty. A missing read-only
        config was named explicitly by the user, so it is an error.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            if self.read_only:
                raise ConfigNotFound(f"Config file not found: {self.path}")
            return {}
        except OSError as e:
            raise FileSystemError(f"Could not read config file {self.path}: {e}")

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigNotFound(f"Config file {self.path} is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise ConfigNotFound(f"Config file {self.path} must contain a JSON object")
        return data

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the preset called ``name``, or None if absent."""
        preset = self.load_all().get(name)
        return dict(preset) if isinstance(preset, dict) else None

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def save(self, name: Optional[str], values: Mapping[str, Any]) -> bool:
        """
        Save ``values`` as the latest record and, when ``name`` is given,
        also as the named preset.

        Returns False without touching the file when the store is read-only.
        """
        if self.read_only:
            self.logger.debug("Skipping save on read-only config", preset=name)
            return False

        presets = self.load_all()
        snapshot = dict(values)
        if name and name != LATEST_PRESET:
            presets[name] = snapshot
        presets[LATEST_PRESET] = snapshot

        self._write(presets)
        self.logger.debug("Presets saved", preset=name, keys=len(snapshot))
        return True

    def _write(self, presets: Dict[str, Dict[str, Any]]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(presets, handle, indent=2)
                handle.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise FileSystemError(f"Could not write config file {self.path}: {e}")

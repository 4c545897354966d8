"""
Default Carbon Options
======================

Query parameters understood by Carbon, with the values used when neither a
preset nor interactive mode says otherwise.
"""

from typing import Any, Dict


LATEST_PRESET = "latest-preset"

# Runtime-only keys, filled per run and never persisted
CODE_KEY = "code"
LANGUAGE_KEY = "l"
RUNTIME_KEYS = frozenset({CODE_KEY, LANGUAGE_KEY})

# Interactive mode may name a preset to save the result under
SAVE_AS_KEY = "preset"

DEFAULT_SETTINGS: Dict[str, Any] = {
    # Theme
    "t": "seti",
    # Language, detected from the file name; setting it in a preset is ignored
    "l": "auto",
    # Background
    "bg": "#ADB7C1",
    # Window theme: none, sharp, bw
    "wt": "none",
    # Window controls
    "wc": True,
    # Font family
    "fm": "Hack",
    # Font size
    "fs": "15px",
    # Line numbers
    "ln": False,
    # Drop shadow
    "ds": False,
    "dsyoff": "20px",
    "dsblur": "68px",
    # Auto adjust width
    "wa": True,
    # Line height
    "lh": "100%",
    # Padding vertical / horizontal
    "pv": "0px",
    "ph": "0px",
    # Squared image
    "si": False,
    # Watermark
    "wm": False,
    # Export size: 1x, 2x, 4x
    "es": "1x",
    # Export type: png, svg. Not a Carbon URL parameter, used to pick the export.
    "type": "png",
}

IMAGE_TYPES = ("png", "svg")

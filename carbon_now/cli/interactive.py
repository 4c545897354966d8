"""
Interactive Mode
================

Asks for Carbon options one by one. The answers override the loaded preset;
answering the last question with a name saves the result under that preset.
"""

from typing import Any, Dict, Mapping

import click

from carbon_now.config.defaults import SAVE_AS_KEY
from carbon_now.core.exceptions import InputError

THEMES = [
    "3024-night", "a11y-dark", "blackboard", "base16-dark", "base16-light", "cobalt",
    "dracula", "duotone-dark", "hopscotch", "lucario", "material", "monokai", "night-owl",
    "nord", "oceanic-next", "one-light", "one-dark", "panda-syntax", "paraiso-dark",
    "seti", "shades-of-purple", "solarized-dark", "solarized-light", "synthwave-84",
    "twilight", "verminal", "vscode", "yeti", "zenburn",
]
FONTS = [
    "Anonymous Pro", "Droid Sans Mono", "Fantasque Sans Mono", "Fira Code", "Hack",
    "IBM Plex Mono", "Inconsolata", "JetBrains Mono", "Monoid", "Source Code Pro",
    "Space Mono", "Ubuntu Mono",
]
WINDOW_THEMES = ["none", "sharp", "bw"]
EXPORT_SIZES = ["1x", "2x", "4x"]
IMAGE_TYPES = ["png", "svg"]


def collect_overrides(current: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Prompt for every option, defaulting to the ``current`` values.

    Raises:
        InputError: If the prompts are aborted with Ctrl-C or end of input
    """
    try:
        return _ask(current)
    except (click.Abort, EOFError) as e:
        raise InputError("Interactive mode aborted, nothing was rendered") from e


def _ask(current: Mapping[str, Any]) -> Dict[str, Any]:
    answers: Dict[str, Any] = {}

    answers["t"] = click.prompt("Theme", default=current.get("t"), type=click.Choice(THEMES))
    answers["fm"] = click.prompt("Font family", default=current.get("fm"), type=click.Choice(FONTS))
    answers["fs"] = click.prompt("Font size", default=current.get("fs"))
    answers["bg"] = click.prompt("Background color", default=current.get("bg"))
    answers["wt"] = click.prompt(
        "Window theme", default=current.get("wt"), type=click.Choice(WINDOW_THEMES)
    )
    answers["wc"] = click.confirm("Show window controls?", default=bool(current.get("wc")))
    answers["wa"] = click.confirm("Auto adjust width?", default=bool(current.get("wa")))
    answers["pv"] = click.prompt("Vertical padding", default=current.get("pv"))
    answers["ph"] = click.prompt("Horizontal padding", default=current.get("ph"))
    answers["ln"] = click.confirm("Show line numbers?", default=bool(current.get("ln")))

    answers["ds"] = click.confirm("Add drop shadow?", default=bool(current.get("ds")))
    if answers["ds"]:
        answers["dsyoff"] = click.prompt("Drop shadow offset", default=current.get("dsyoff"))
        answers["dsblur"] = click.prompt("Drop shadow blur", default=current.get("dsblur"))

    answers["si"] = click.confirm("Make it squared?", default=bool(current.get("si")))
    answers["wm"] = click.confirm("Add watermark?", default=bool(current.get("wm")))
    answers["es"] = click.prompt(
        "Export size", default=current.get("es"), type=click.Choice(EXPORT_SIZES)
    )
    answers["type"] = click.prompt(
        "Export type", default=current.get("type"), type=click.Choice(IMAGE_TYPES)
    )

    preset = click.prompt(
        "Save these settings as a preset (name, empty to skip)", default="", show_default=False
    )
    if preset.strip():
        answers[SAVE_AS_KEY] = preset.strip()

    return answers

"""
Language Detection
==================

Maps a source file name to a Carbon language mode via Pygments lexers.
Anything Pygments does not recognise is left to Carbon's own detection.
"""

from pathlib import PurePath
from typing import Optional

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

AUTO = "auto"

# Pygments alias -> Carbon (CodeMirror) mode, where the two differ
CARBON_MODES = {
    "c": "text/x-csrc",
    "cpp": "text/x-c++src",
    "csharp": "text/x-csharp",
    "java": "text/x-java",
    "kotlin": "text/x-kotlin",
    "scala": "text/x-scala",
    "objective-c": "text/x-objectivec",
    "js": "javascript",
    "javascript": "javascript",
    "jsx": "jsx",
    "ts": "application/typescript",
    "typescript": "application/typescript",
    "tsx": "text/typescript-jsx",
    "json": "application/json",
    "python": "python",
    "python3": "python",
    "py": "python",
    "ruby": "ruby",
    "rb": "ruby",
    "go": "go",
    "rust": "rust",
    "php": "text/x-php",
    "bash": "application/x-sh",
    "sh": "application/x-sh",
    "shell": "application/x-sh",
    "html": "htmlmixed",
    "xml": "xml",
    "css": "css",
    "scss": "text/x-scss",
    "sass": "sass",
    "less": "text/x-less",
    "yaml": "yaml",
    "toml": "toml",
    "markdown": "markdown",
    "md": "markdown",
    "sql": "sql",
    "swift": "swift",
    "elixir": "elixir",
    "erlang": "erlang",
    "haskell": "haskell",
    "lua": "lua",
    "perl": "perl",
    "r": "r",
    "dockerfile": "dockerfile",
    "docker": "dockerfile",
    "graphql": "graphql",
    "vue": "vue",
    "clojure": "clojure",
    "dart": "dart",
}


def get_language(file_name: Optional[str]) -> str:
    """Return the Carbon language mode for ``file_name``, or ``auto``."""
    if not file_name:
        return AUTO

    try:
        lexer = get_lexer_for_filename(PurePath(file_name).name)
    except ClassNotFound:
        return AUTO

    for alias in lexer.aliases:
        mode = CARBON_MODES.get(alias.lower())
        if mode:
            return mode
    return AUTO

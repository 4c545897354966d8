"""
Content Processing
==================

Line-range selection and URL encoding of the snippet sent to Carbon.
"""

from urllib.parse import quote

from carbon_now.core.exceptions import InputError

# Characters left alone by JavaScript's encodeURIComponent
URI_COMPONENT_SAFE = "-_.!~*'()"


def process_content(content: str, start: int = 1, end: int = 1000) -> str:
    """
    Keep lines ``start`` through ``end`` (1-based, inclusive).

    Raises:
        InputError: If the range is inverted or selects nothing
    """
    if start > end:
        raise InputError(f"Start line {start} is after end line {end}")

    if content.endswith("\n"):
        content = content[:-1]
    lines = content.split("\n")

    selected = lines[start - 1 : end]
    if not selected:
        raise InputError(f"Line range {start}-{end} is outside the input ({len(lines)} lines)")
    return "\n".join(selected)


def encode_uri_component(value: str) -> str:
    return quote(value, safe=URI_COMPONENT_SAFE)


def encode_content(content: str, start: int = 1, end: int = 1000) -> str:
    """Select the requested lines and encode them for the ``code`` parameter."""
    return encode_uri_component(process_content(content, start, end))

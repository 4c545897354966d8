"""
Request URL
===========

Serializes effective settings into the Carbon URL handed to the renderer.
"""

from typing import Any, Mapping
from urllib.parse import quote

from carbon_now.models.schemas import CarbonSettings


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_string(params: Mapping[str, Any]) -> str:
    """Sorted ``key=value`` pairs, strictly percent-encoded; None values dropped."""
    pairs = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        pairs.append(f"{quote(str(key), safe='')}={quote(_stringify(value), safe='-_.~')}")
    return "&".join(pairs)


def build_request_url(base_url: str, settings: CarbonSettings) -> str:
    """
    Build ``<base_url>?<query>`` from settings plus runtime fields.

    The ``code`` value already carries one round of URI encoding, so it ends up
    encoded twice in the URL, which is what Carbon decodes.
    """
    query = build_query_string(settings.query_params())
    return f"{base_url}?{query}" if query else base_url

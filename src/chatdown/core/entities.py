"""Minimal HTML entity table used when recovering LaTeX from error placeholders.

The table is deliberately small and fixed. Decoding anything beyond it would
risk corrupting LaTeX source that legitimately contains ``&name;`` sequences,
so unknown entities are passed through unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
import re
from types import MappingProxyType


ENTITIES: Mapping[str, str] = MappingProxyType(
    {
        "&amp;": "&",
        "&lt;": "<",
        "&gt;": ">",
        "&quot;": '"',
        "&#39;": "'",
        "&nbsp;": " ",
    }
)

_ENTITY_PATTERN = re.compile(r"&[^;&\s]+;")


def decode_entities(text: str) -> str:
    """Decode the entities listed in :data:`ENTITIES`, leaving others untouched.

    >>> decode_entities("&amp;&lt;")
    '&<'
    >>> decode_entities("unknown &unknownEntity;")
    'unknown &unknownEntity;'
    """
    return _ENTITY_PATTERN.sub(lambda match: ENTITIES.get(match.group(0), match.group(0)), text)


def encode_entities(text: str) -> str:
    """Escape the characters that :func:`decode_entities` restores."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


__all__ = ["ENTITIES", "decode_entities", "encode_entities"]

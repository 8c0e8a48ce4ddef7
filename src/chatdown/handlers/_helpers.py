"""Internal helpers shared across handler modules."""

from __future__ import annotations

import re
from typing import Any

from bs4.element import Tag

from chatdown.core.dom import find_ancestor, get_attribute, has_class, tag_name


MATH_MARKERS = ("katex", "katex-display", "math-block", "math-inline")
DISPLAY_MATH_MARKERS = ("katex-display", "math-block")
CODE_WRAPPER_CLASSES = ("code-block", "md-code-block")

_BACKTICK_RUN = re.compile(r"`+")
_UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:text/html")


def is_math_marker(node: Any) -> bool:
    """Return True for elements flagged as rendered math."""
    if not isinstance(node, Tag):
        return False
    return has_class(node, *MATH_MARKERS) or node.has_attr("data-math")


def inside_math(node: Tag) -> bool:
    """Return True when an ancestor already carries a math marker."""
    return find_ancestor(node, is_math_marker) is not None


def is_code_wrapper(node: Any) -> bool:
    return tag_name(node) == "pre" or has_class(node, *CODE_WRAPPER_CLASSES)


def inside_code_wrapper(node: Tag) -> bool:
    return find_ancestor(node, is_code_wrapper) is not None


def longest_backtick_run(text: str) -> int:
    return max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)


def is_safe_href(href: str) -> bool:
    """Reject link targets that would execute script when rendered."""
    candidate = "".join(href.split()).lower()
    return not candidate.startswith(_UNSAFE_SCHEMES)


def attribute_text(node: Tag, name: str) -> str:
    return (get_attribute(node, name) or "").strip()


__all__ = [
    "CODE_WRAPPER_CLASSES",
    "DISPLAY_MATH_MARKERS",
    "MATH_MARKERS",
    "attribute_text",
    "inside_code_wrapper",
    "inside_math",
    "is_code_wrapper",
    "is_math_marker",
    "is_safe_href",
    "longest_backtick_run",
]

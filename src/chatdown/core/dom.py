"""Read-only helpers over BeautifulSoup nodes.

Nothing in this module mutates the tree: the engine treats its input as
immutable and only navigates it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, cast

from bs4.element import NavigableString, PageElement, PreformattedString, Tag


def is_element(node: Any) -> bool:
    """Return True for element nodes (including the document root)."""
    return isinstance(node, Tag)


def is_text(node: Any) -> bool:
    """Return True for character data, excluding comments and declarations."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def tag_name(node: Any) -> str:
    """Return the lower-cased tag name of an element, or an empty string."""
    if not isinstance(node, Tag):
        return ""
    return (node.name or "").lower()


def coerce_attribute(value: Any) -> str | None:
    """Normalise a BeautifulSoup attribute value to a string when possible."""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(value, Iterable):
        items = [item for item in value if isinstance(item, str)]
        return " ".join(items) if items else None
    return None


def gather_classes(value: Any) -> list[str]:
    """Return a list of classes extracted from a BeautifulSoup attribute."""
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
        return [cast(str, item) for item in value if isinstance(item, str)]
    return []


def get_attribute(node: Any, name: str) -> str | None:
    """Return an attribute of an element as a string."""
    if not isinstance(node, Tag):
        return None
    return coerce_attribute(node.get(name))


def attribute_int(node: Any, name: str, *, default: int) -> int:
    """Return an integer attribute, or ``default`` when missing or malformed."""
    value = get_attribute(node, name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def has_class(node: Any, *classes: str) -> bool:
    """Return True when the element carries any of ``classes``."""
    if not isinstance(node, Tag):
        return False
    present = gather_classes(node.get("class"))
    return any(cls in present for cls in classes)


def element_children(node: Any) -> list[Tag]:
    """Return the element children of ``node`` in document order."""
    if not isinstance(node, Tag):
        return []
    return [child for child in node.children if isinstance(child, Tag)]


def iter_ancestors(node: PageElement) -> Iterator[Tag]:
    """Yield element ancestors from the closest outwards, stopping at the document."""
    parent = node.parent
    while parent is not None and isinstance(parent, Tag):
        if parent.name == "[document]":
            return
        yield parent
        parent = parent.parent


def find_ancestor(node: PageElement, predicate: Callable[[Tag], bool]) -> Tag | None:
    """Return the closest ancestor satisfying ``predicate``."""
    for ancestor in iter_ancestors(node):
        if predicate(ancestor):
            return ancestor
    return None


def closest(node: Any, selector: str) -> Tag | None:
    """Return the node itself or its closest ancestor matching a CSS selector."""
    if not isinstance(node, Tag):
        return None
    return cast(Tag | None, node.css.closest(selector))


def matches(node: Any, selector: str) -> bool:
    """Return True when an element matches a CSS selector."""
    if not isinstance(node, Tag):
        return False
    return bool(node.css.match(selector))


def select_one(node: Any, selector: str) -> Tag | None:
    """Return the first descendant matching ``selector``."""
    if not isinstance(node, Tag):
        return None
    return cast(Tag | None, node.select_one(selector))


def text_content(node: Any) -> str:
    """Return the flattened text of a node, like the DOM ``textContent``."""
    if isinstance(node, Tag):
        return node.get_text()
    if is_text(node):
        return str(node)
    return ""


def outer_html(node: Any) -> str:
    """Serialise a node back to markup."""
    if isinstance(node, Tag):
        return node.decode()
    return str(node)


__all__ = [
    "attribute_int",
    "closest",
    "coerce_attribute",
    "element_children",
    "find_ancestor",
    "gather_classes",
    "get_attribute",
    "has_class",
    "is_element",
    "is_text",
    "iter_ancestors",
    "matches",
    "outer_html",
    "select_one",
    "tag_name",
    "text_content",
]

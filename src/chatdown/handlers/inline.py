"""Inline formatting rules."""

from __future__ import annotations

from bs4.element import Tag

from chatdown.core.context import RuleContext
from chatdown.core.rules import converts

from ._helpers import attribute_text, is_safe_href


def _wrap(content: str, marker: str) -> str:
    """Wrap ``content`` in ``marker`` while keeping surrounding whitespace outside."""
    stripped = content.strip()
    if not stripped:
        return content
    leading = content[: len(content) - len(content.lstrip())]
    trailing = content[len(content.rstrip()) :]
    return f"{leading}{marker}{stripped}{marker}{trailing}"


@converts({"strong", "b"}, priority=7, name="strong")
def render_strong(content: str, node: Tag, context: RuleContext) -> str:
    return _wrap(content, "**")


@converts({"em", "i"}, priority=8, name="emphasis")
def render_emphasis(content: str, node: Tag, context: RuleContext) -> str:
    return _wrap(content, "*")


@converts({"a"}, priority=10, name="link")
def render_link(content: str, node: Tag, context: RuleContext) -> str:
    """Render ``[text](href)``; unsafe targets keep only their text."""
    href = attribute_text(node, "href")
    text = content.strip()
    if not href:
        return text
    if not is_safe_href(href):
        context.warn(f"Dropped unsafe link target on '{text or href}'")
        return text
    return f"[{text or href}]({href})"


@converts({"img"}, priority=11, name="image")
def render_image(content: str, node: Tag, context: RuleContext) -> str:
    src = attribute_text(node, "src")
    alt = attribute_text(node, "alt")
    if not src:
        return alt
    return f"![{alt}]({src})"


@converts({"br"}, priority=12, name="line-break")
def render_line_break(content: str, node: Tag, context: RuleContext) -> str:
    return "  \n"

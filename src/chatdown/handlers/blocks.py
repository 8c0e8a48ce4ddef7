"""Block-level rules: headings, lists, quotes, paragraphs and rules."""

from __future__ import annotations

from bs4.element import Tag

from chatdown.core.context import RuleContext
from chatdown.core.dom import attribute_int, is_text, iter_ancestors, tag_name
from chatdown.core.rules import converts


HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
LIST_INDENT = "  "


@converts(HEADING_TAGS, priority=5, name="heading")
def render_heading(content: str, node: Tag, context: RuleContext) -> str:
    text = " ".join(content.split())
    if not text:
        return ""
    level = int(tag_name(node)[1])
    return f"{'#' * level} {text}\n\n"


def list_level(node: Tag) -> int:
    """Number of ``<li>`` ancestors, i.e. the nesting depth of a list."""
    return sum(1 for ancestor in iter_ancestors(node) if tag_name(ancestor) == "li")


def _list_item(item: Tag, context: RuleContext) -> str:
    parts: list[str] = []
    for child in item.children:
        if is_text(child):
            parts.append(str(child))
        elif isinstance(child, Tag):
            if tag_name(child) in {"ul", "ol"}:
                # Indentation whitespace before a nested list would leave a blank line.
                parts = ["".join(parts).rstrip(), "\n" + context.process(child)]
            else:
                parts.append(context.process(child))
    return "".join(parts).strip()


@converts({"ul", "ol"}, priority=6, name="list")
def render_list(content: str, node: Tag, context: RuleContext) -> str:
    """Render ``-`` or numbered items, indenting two spaces per nesting level.

    Items are converted from their own children so that nested lists are
    placed on their own lines with the deeper indentation.
    """
    ordered = tag_name(node) == "ol"
    start = attribute_int(node, "start", default=1) if ordered else 1
    indent = LIST_INDENT * list_level(node)

    lines: list[str] = []
    items = [child for child in node.children if tag_name(child) == "li"]
    for offset, item in enumerate(items):
        marker = f"{start + offset}." if ordered else "-"
        lines.append(f"{indent}{marker} {_list_item(item, context)}\n")

    result = "".join(lines)
    if not indent:
        result += "\n"
    return result


@converts({"blockquote"}, priority=6, name="blockquote")
def render_blockquote(content: str, node: Tag, context: RuleContext) -> str:
    text = content.strip()
    if not text:
        return ""
    quoted = (f"> {line}" if line.strip() else ">" for line in text.split("\n"))
    return "\n".join(quoted) + "\n\n"


@converts({"p"}, priority=10, name="paragraph")
def render_paragraph(content: str, node: Tag, context: RuleContext) -> str:
    text = content.strip()
    return f"{text}\n\n" if text else ""


@converts({"hr"}, priority=11, name="horizontal-rule")
def render_horizontal_rule(content: str, node: Tag, context: RuleContext) -> str:
    return "\n---\n\n"

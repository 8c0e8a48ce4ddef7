"""GitHub-flavoured pipe table rule."""

from __future__ import annotations

import re

from bs4.element import Tag

from chatdown.core.context import RuleContext
from chatdown.core.dom import get_attribute, tag_name
from chatdown.core.rules import converts


_TEXT_ALIGN = re.compile(r"text-align\s*:\s*(left|center|right)", re.IGNORECASE)
_SEPARATORS = {"left": ":---", "center": ":---:", "right": "---:"}


def _owned_rows(table: Tag) -> list[Tag]:
    """Rows belonging to ``table`` itself, skipping nested tables."""
    return [row for row in table.find_all("tr") if row.find_parent("table") is table]


def _cells(row: Tag) -> list[Tag]:
    return list(row.find_all(["th", "td"], recursive=False))


def _cell_alignment(cell: Tag) -> str | None:
    style = get_attribute(cell, "style") or ""
    match = _TEXT_ALIGN.search(style)
    if match:
        return match.group(1).lower()
    align = (get_attribute(cell, "align") or "").strip().lower()
    if align in _SEPARATORS:
        return align
    return None


def _cell_markdown(cell: Tag, context: RuleContext) -> str:
    text = context.process_children(cell).strip()
    text = text.replace("|", "\\|")
    return " ".join(text.splitlines())


def _header_row(table: Tag, rows: list[Tag]) -> Tag | None:
    for row in rows:
        section = row.parent
        if tag_name(section) == "thead" and section.find_parent("table") is table:
            return row
    if rows and any(tag_name(cell) == "th" for cell in _cells(rows[0])):
        return rows[0]
    return None


def _format_row(values: list[str]) -> str:
    return "| " + " | ".join(values) + " |"


@converts({"table"}, priority=4, name="table")
def render_table(content: str, node: Tag, context: RuleContext) -> str:
    """Render a table as a pipe table, padding short rows."""
    rows = [row for row in _owned_rows(node) if _cells(row)]
    if not rows:
        return ""

    column_count = len(_cells(rows[0]))
    alignments = [_cell_alignment(cell) for cell in _cells(rows[0])]
    header = _header_row(node, rows)

    def row_values(row: Tag) -> list[str]:
        values = [_cell_markdown(cell, context) for cell in _cells(row)]
        values.extend("" for _ in range(column_count - len(values)))
        return values

    lines: list[str] = []
    if header is not None:
        lines.append(_format_row(row_values(header)))
    else:
        lines.append(_format_row([""] * column_count))
    lines.append(
        _format_row([_SEPARATORS.get(alignment or "", "---") for alignment in alignments])
    )
    lines.extend(_format_row(row_values(row)) for row in rows if row is not header)
    return "\n".join(lines) + "\n\n"

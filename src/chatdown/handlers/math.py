"""Rules turning rendered formulas back into LaTeX delimiters."""

from __future__ import annotations

from bs4.element import Tag

from chatdown.core.context import RuleContext
from chatdown.core.dom import has_class
from chatdown.core.rules import converts

from ._helpers import inside_math


def is_display_math(node: object) -> bool:
    """Outermost ``.katex-display`` or ``.math-block`` element."""
    if not isinstance(node, Tag) or not has_class(node, "katex-display", "math-block"):
        return False
    return not inside_math(node)


def is_inline_math(node: object) -> bool:
    """Outermost ``.katex`` (non display) or ``.math-inline`` element."""
    if not isinstance(node, Tag):
        return False
    if has_class(node, "katex-display", "math-block"):
        return False
    if not has_class(node, "katex", "math-inline"):
        return False
    return not inside_math(node)


def _extract(content: str, node: Tag, context: RuleContext) -> tuple[str, bool] | None:
    result = context.extract_latex(node)
    if result is None or not result.latex:
        context.warn(f"Could not extract LaTeX from <{node.name}>, keeping its content")
        return None
    return result.latex, result.is_markup


@converts(is_display_math, priority=1, name="math-block")
def render_math_block(content: str, node: Tag, context: RuleContext) -> str:
    """Emit display math as a ``$$`` block."""
    extracted = _extract(content, node, context)
    if extracted is None:
        return content
    latex, verbatim = extracted
    if verbatim:
        return latex
    return f"$$\n{latex}\n$$\n\n"


@converts(is_inline_math, priority=2, name="math-inline")
def render_math_inline(content: str, node: Tag, context: RuleContext) -> str:
    """Emit inline math between single dollars."""
    extracted = _extract(content, node, context)
    if extracted is None:
        return content
    latex, verbatim = extracted
    if verbatim:
        return latex
    return f"${latex}$"

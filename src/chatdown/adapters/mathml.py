"""Partial MathML to LaTeX conversion.

Only the presentation elements that chat platforms actually emit are mapped.
Unknown elements contribute the conversion of their element children, which
keeps the output readable even when the mapping is lossy.
"""

from __future__ import annotations

from bs4.element import Tag

from chatdown.core.dom import element_children, tag_name


DEFAULT_MAX_NESTING = 64

_TOKEN_TAGS = frozenset({"mi", "mn", "mo", "ms"})
_IGNORED_TAGS = frozenset({"annotation", "annotation-xml", "mspace", "none", "mprescripts"})


class MathMLNestingError(ValueError):
    """Raised when a MathML tree is nested deeper than allowed."""


def mathml_to_latex(element: Tag, *, max_nesting: int = DEFAULT_MAX_NESTING) -> str:
    """Convert a MathML element into LaTeX source.

    >>> from bs4 import BeautifulSoup
    >>> soup = BeautifulSoup("<math><mfrac><mi>a</mi><mi>b</mi></mfrac></math>", "html.parser")
    >>> mathml_to_latex(soup.math)
    '\\\\frac{a}{b}'
    """
    return _convert(element, 0, max_nesting).strip()


def _join(element: Tag, depth: int, limit: int) -> str:
    return " ".join(_convert(child, depth + 1, limit) for child in element_children(element))


def _pair(element: Tag, depth: int, limit: int) -> tuple[str, str] | None:
    children = element_children(element)
    if len(children) < 2:
        return None
    return _convert(children[0], depth + 1, limit), _convert(children[1], depth + 1, limit)


def _convert(element: Tag, depth: int, limit: int) -> str:
    if depth > limit:
        raise MathMLNestingError(f"MathML nested deeper than {limit} levels")

    name = tag_name(element)
    if name in _TOKEN_TAGS:
        return element.get_text()
    if name in _IGNORED_TAGS:
        return ""
    if name == "mtext":
        return f"\\text{{{element.get_text()}}}"

    if name in {"msub", "msup", "mfrac", "mroot"}:
        pair = _pair(element, depth, limit)
        if pair is None:
            return ""
        first, second = pair
        if name == "msub":
            return f"{{{first}}}_{{{second}}}"
        if name == "msup":
            return f"{{{first}}}^{{{second}}}"
        if name == "mfrac":
            return f"\\frac{{{first}}}{{{second}}}"
        return f"\\sqrt[{second}]{{{first}}}"

    if name == "msubsup":
        children = element_children(element)
        if len(children) < 3:
            return ""
        base, sub, sup = (_convert(child, depth + 1, limit) for child in children[:3])
        return f"{{{base}}}_{{{sub}}}^{{{sup}}}"

    if name == "msqrt":
        return f"\\sqrt{{{_join(element, depth, limit)}}}"

    # mrow, math, semantics, mstyle and anything unknown
    return _join(element, depth, limit)


__all__ = ["DEFAULT_MAX_NESTING", "MathMLNestingError", "mathml_to_latex"]

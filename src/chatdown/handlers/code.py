"""Code block and inline code rules."""

from __future__ import annotations

from typing import Any

from bs4.element import Tag

from chatdown.core.context import RuleContext
from chatdown.core.dom import has_class, tag_name
from chatdown.core.rules import converts

from ._helpers import CODE_WRAPPER_CLASSES, inside_code_wrapper, longest_backtick_run


def is_code_block(node: object) -> bool:
    """``<pre>`` holding ``<code>``, or a platform code-block wrapper."""
    if not isinstance(node, Tag):
        return False
    if tag_name(node) == "pre":
        return node.find("code") is not None
    if has_class(node, *CODE_WRAPPER_CLASSES):
        return node.find(["code", "pre"]) is not None
    return False


def is_inline_code(node: Any) -> bool:
    return tag_name(node) == "code" and not inside_code_wrapper(node)


def normalize_code(raw: str) -> str:
    """Normalise newlines and strip the indentation shared by all non-blank lines.

    >>> normalize_code("\\n    a\\n      b\\n")
    'a\\n  b'
    """
    code = raw.replace("\r\n", "\n").replace("\r", "\n")
    if code.startswith("\n"):
        code = code[1:]
    if code.endswith("\n"):
        code = code[:-1]

    lines = code.split("\n")
    indents = [len(line) - len(line.lstrip(" \t")) for line in lines if line.strip()]
    if not indents:
        return code
    common = min(indents)
    if common == 0:
        return code
    return "\n".join(line[common:] for line in lines)


def code_fence(code: str) -> str:
    """Return a backtick fence longer than any backtick run inside ``code``."""
    return "`" * max(3, longest_backtick_run(code) + 1)


def _code_element(node: Tag) -> Tag | None:
    if tag_name(node) == "code":
        return node
    code = node.find("code")
    if isinstance(code, Tag):
        return code
    pre = node if tag_name(node) == "pre" else node.find("pre")
    return pre if isinstance(pre, Tag) else None


@converts(is_code_block, priority=3, name="code-block")
def render_code_block(content: str, node: Tag, context: RuleContext) -> str:
    """Render a fenced code block, tagged with the detected language."""
    code_element = _code_element(node)
    if code_element is None:
        fence = code_fence(content)
        return f"{fence}\n{content}\n{fence}\n\n"

    language = context.code_language(code_element)
    code = normalize_code(code_element.get_text())
    fence = code_fence(code)
    return f"{fence}{language}\n{code}\n{fence}\n\n"


@converts(is_inline_code, priority=9, name="code-inline")
def render_inline_code(content: str, node: Tag, context: RuleContext) -> str:
    """Wrap inline code in a backtick span long enough for its content."""
    if not content:
        return ""
    delimiter = "`" * (longest_backtick_run(content) + 1)
    if content.startswith("`") or content.endswith("`"):
        return f"{delimiter} {content} {delimiter}"
    return f"{delimiter}{content}{delimiter}"

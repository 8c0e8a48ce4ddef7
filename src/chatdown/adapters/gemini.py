"""Adapter for Gemini transcripts (gemini.google.com).

Gemini keeps the LaTeX source of each formula in a ``data-math`` attribute on
``.math-inline`` / ``.math-block`` wrappers, and labels code blocks through a
``.code-block-decoration`` header instead of classes.
"""

from __future__ import annotations

import re

from bs4.element import Tag

from .base import PlatformAdapter


_SPACE_VARIANTS = re.compile(r"[\u00a0\u2000-\u200a\u202f\u205f\u3000]")
_ZERO_WIDTH = re.compile(r"[\u200b-\u200d\ufeff]")


class GeminiAdapter(PlatformAdapter):
    name = "Gemini"
    hostnames = ("gemini.google.com",)
    max_latex_length = 50_000

    math_selector = (
        ".math-inline[data-math], .math-block[data-math], "
        ".katex:not(.math-inline .katex):not(.math-block .katex), "
        ".katex-display:not(.math-block .katex-display)"
    )
    code_selector = ".code-block code, .code-container, pre > code"
    display_classes = ("math-block", "katex-display")
    latex_attributes = ("data-math", "data-latex-source")
    code_label_selectors = (
        (".code-block", ".code-block-decoration > span"),
        (".code-block", ".code-block-decoration"),
    )
    signals = (
        ("model-response, user-query", 0.4),
        (".conversation-container", 0.25),
        (".math-inline, .math-block", 0.2),
        (".code-block", 0.1),
        ("[data-math]", 0.15),
    )

    def is_block_math(self, node: Tag) -> bool:
        if super().is_block_math(node):
            return True
        return node.select_one(".katex-display") is not None

    def latex_text_source(self, node: Tag) -> Tag:
        # The rendered glyphs live in .katex-html; the MathML twin would double the text.
        katex_html = node.select_one(".katex-html")
        return katex_html if katex_html is not None else node

    def clean_text(self, text: str) -> str:
        if not text:
            return ""
        text = _SPACE_VARIANTS.sub(" ", text)
        text = _ZERO_WIDTH.sub("", text)
        return text.replace("\r\n", "\n").strip()


__all__ = ["GeminiAdapter"]

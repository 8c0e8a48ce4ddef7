"""Adapter for Deepseek transcripts (chat.deepseek.com)."""

from __future__ import annotations

from .base import PlatformAdapter


class DeepseekAdapter(PlatformAdapter):
    """KaTeX math; code blocks carry their language in a banner above the ``<pre>``."""

    name = "Deepseek"
    hostnames = ("deepseek.com",)
    code_selector = ".md-code-block pre, pre > code"
    code_wrapper_selectors = ("pre", ".md-code-block")
    code_label_selectors = (
        (".md-code-block", ".md-code-block-infostring"),
        (".md-code-block", ".d813de27"),
        (".md-code-block", ".md-code-block-banner span"),
    )
    signals = (
        (".ds-markdown", 0.45),
        (".md-code-block", 0.25),
        (".ds-think-content", 0.15),
        (".katex", 0.1),
    )


__all__ = ["DeepseekAdapter"]

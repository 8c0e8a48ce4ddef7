"""Adapter for Claude transcripts (claude.ai)."""

from __future__ import annotations

from .base import PlatformAdapter


class ClaudeAdapter(PlatformAdapter):
    """KaTeX math; code language may sit on the ``<pre>`` wrapper."""

    name = "Claude"
    hostnames = ("claude.ai",)
    signals = (
        (".font-claude-response", 0.45),
        ('[data-testid="user-message"]', 0.25),
        ("[data-is-streaming]", 0.2),
        (".katex", 0.1),
    )


__all__ = ["ClaudeAdapter"]

"""Adapter for ChatGPT transcripts (chatgpt.com, chat.openai.com)."""

from __future__ import annotations

from .base import PlatformAdapter


class ChatGPTAdapter(PlatformAdapter):
    """KaTeX math with ``language-*`` classes on code elements."""

    name = "ChatGPT"
    hostnames = ("chatgpt.com", "chat.openai.com")
    code_selector = "pre code"
    signals = (
        ("[data-message-author-role]", 0.4),
        ('article[data-turn="assistant"]', 0.2),
        (".markdown.prose", 0.25),
        (".katex", 0.1),
        ('pre code[class*="language-"]', 0.05),
    )


__all__ = ["ChatGPTAdapter"]

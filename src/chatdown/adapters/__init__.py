"""Platform adapters for the supported chat services."""

from __future__ import annotations

from .base import LatexResult, PlatformAdapter, validate_latex
from .chatgpt import ChatGPTAdapter
from .claude import ClaudeAdapter
from .deepseek import DeepseekAdapter
from .gemini import GeminiAdapter
from .registry import AdapterRegistry, UnknownPlatformError, default_registry


__all__ = [
    "AdapterRegistry",
    "ChatGPTAdapter",
    "ClaudeAdapter",
    "DeepseekAdapter",
    "GeminiAdapter",
    "LatexResult",
    "PlatformAdapter",
    "UnknownPlatformError",
    "default_registry",
    "validate_latex",
]

"""Convert chat transcripts rendered as HTML back into Markdown.

Typical use::

    from chatdown import GeminiAdapter, Parser, load_html

    soup = load_html(html)
    markdown = Parser(GeminiAdapter()).parse(soup)
"""

from __future__ import annotations

from chatdown.adapters import (
    AdapterRegistry,
    ChatGPTAdapter,
    ClaudeAdapter,
    DeepseekAdapter,
    GeminiAdapter,
    LatexResult,
    PlatformAdapter,
    UnknownPlatformError,
    default_registry,
    validate_latex,
)
from chatdown.core.config import ParserOptions, load_options
from chatdown.core.context import ConversionIssue, RuleContext
from chatdown.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    RecordingEmitter,
)
from chatdown.core.documents import load_html, select_root, strip_noise
from chatdown.core.entities import decode_entities
from chatdown.core.exceptions import (
    BudgetExceededError,
    ChatdownError,
    DepthExceededError,
    EngineSealedError,
    OptionsError,
    ParserError,
    RecoveryAction,
    RuleConflictError,
)
from chatdown.core.parser import ParseMetadata, ParseResult, Parser, convert
from chatdown.core.rules import Rule, RuleEngine, converts
from chatdown.handlers import build_default_engine
from chatdown.preview import render_preview
from chatdown.version import get_version


__version__ = get_version()

__all__ = [
    "AdapterRegistry",
    "BudgetExceededError",
    "ChatGPTAdapter",
    "ChatdownError",
    "ClaudeAdapter",
    "ConversionIssue",
    "DeepseekAdapter",
    "DepthExceededError",
    "DiagnosticEmitter",
    "EngineSealedError",
    "GeminiAdapter",
    "LatexResult",
    "LoggingEmitter",
    "NullEmitter",
    "OptionsError",
    "ParseMetadata",
    "ParseResult",
    "Parser",
    "ParserError",
    "ParserOptions",
    "PlatformAdapter",
    "RecordingEmitter",
    "RecoveryAction",
    "Rule",
    "RuleConflictError",
    "RuleContext",
    "RuleEngine",
    "UnknownPlatformError",
    "__version__",
    "build_default_engine",
    "convert",
    "converts",
    "decode_entities",
    "default_registry",
    "load_html",
    "load_options",
    "render_preview",
    "select_root",
    "strip_noise",
    "validate_latex",
]

"""Tree to Markdown conversion driver.

The parser walks a BeautifulSoup tree depth-first in post-order: children are
converted before their parent, and the parent's rule receives the children's
markdown as ``content``. Each ``parse()`` call owns a fresh
:class:`~chatdown.core.context.ConversionContext`, so a parser instance can be
reused for any number of documents, sequentially.

Two error boundaries surround every element:

- the node boundary falls back to the node's flattened text;
- the rule boundary falls back to the children's markdown.

Budget and depth violations are abort-class errors. They cross both
boundaries and are turned into a degraded document by :meth:`Parser.parse`,
which never raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

from bs4.element import Tag

from . import dom
from .arena import MISSING, NodeArena
from .config import ParserOptions
from .context import ConversionContext, ConversionIssue, RuleContext
from .diagnostics import DiagnosticEmitter, LoggingEmitter
from .exceptions import ParserError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from chatdown.adapters.base import PlatformAdapter

    from .rules import RuleEngine


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParseMetadata:
    """Statistics collected during one conversion."""

    platform: str
    node_count: int
    processing_time_ms: float
    warnings: tuple[str, ...] = ()
    errors: tuple[ConversionIssue, ...] = ()
    aborted: bool = False
    abort_reason: str | None = None


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Markdown output paired with its metadata."""

    markdown: str
    metadata: ParseMetadata = field(compare=False)

    def __str__(self) -> str:
        return self.markdown


def degraded_output(root: Any, message: str) -> str:
    """Render the fallback document used when a conversion is aborted."""
    return f"<!-- Parser {message} -->\n\n{dom.text_content(root)}"


class Parser:
    """Convert BeautifulSoup trees into Markdown through a rule engine."""

    def __init__(
        self,
        adapter: PlatformAdapter,
        options: ParserOptions | None = None,
        *,
        engine: RuleEngine | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        if engine is None:
            from chatdown.handlers import build_default_engine

            engine = build_default_engine()
        self.adapter = adapter
        self.options = options or ParserOptions()
        self.engine = engine
        self.emitter = emitter or LoggingEmitter(logger_obj=logger)

    def parse(self, root: Any) -> str:
        """Convert ``root`` and return the Markdown document."""
        return self.parse_with_metadata(root).markdown

    def parse_with_metadata(self, root: Any) -> ParseResult:
        """Convert ``root`` and return the Markdown together with statistics."""
        self.engine.seal()
        context = ConversionContext(
            options=self.options,
            adapter=self.adapter,
            emitter=self.emitter,
            arena=NodeArena.build(root, limit=self.options.max_node_count + 1),
        )

        abort_reason: str | None = None
        try:
            markdown = self.adapter.clean_text(self.process_node(root, context, 0))
        except ParserError as exc:
            abort_reason = str(exc)
            markdown = degraded_output(root, abort_reason)
            self.emitter.warning(f"Conversion aborted: {abort_reason}")
            self.emitter.event(
                "parse_aborted",
                {
                    "reason": abort_reason,
                    "platform": self.adapter.name,
                    "node_count": context.node_count,
                    **exc.context,
                },
            )
        except Exception as exc:  # noqa: BLE001 - parse() never raises
            abort_reason = f"failed: {exc}"
            context.record_error(exc, node=root, handler="parser", recovery="abort")
            markdown = degraded_output(root, abort_reason)

        metadata = ParseMetadata(
            platform=self.adapter.name,
            node_count=context.node_count,
            processing_time_ms=context.elapsed_ms(),
            warnings=tuple(context.warnings),
            errors=tuple(context.errors),
            aborted=abort_reason is not None,
            abort_reason=abort_reason,
        )
        if self.options.enable_performance_logging:
            self.emitter.event(
                "parse_complete",
                {
                    "platform": metadata.platform,
                    "node_count": metadata.node_count,
                    "processing_time_ms": metadata.processing_time_ms,
                    "warnings": len(metadata.warnings),
                    "errors": len(metadata.errors),
                    "aborted": metadata.aborted,
                },
            )
        return ParseResult(markdown=markdown, metadata=metadata)

    def process_node(self, node: Any, context: ConversionContext, depth: int) -> str:
        """Convert a single node, memoizing the result for the current conversion."""
        cached = context.converted.lookup(node)
        if cached is not MISSING:
            return cached

        context.visit(node, depth)
        markdown = context.guard(
            lambda: self._convert(node, context, depth),
            lambda: dom.text_content(node),
            node=node,
            handler="node",
        )
        return context.converted.store(node, markdown)

    def _convert(self, node: Any, context: ConversionContext, depth: int) -> str:
        if dom.is_text(node):
            return str(node)
        if not isinstance(node, Tag):
            return ""

        rule = self.engine.find_rule(node, context.resolutions)
        content = "".join(self.process_node(child, context, depth + 1) for child in node.children)
        if rule is None:
            return content

        rule_context = RuleContext(
            node=node,
            depth=depth,
            conversion=context,
            processor=self.process_node,
        )
        return context.guard(
            lambda: rule.replacement(content, node, rule_context),
            lambda: content,
            node=node,
            handler=rule.name,
        )


def convert(
    root: Any,
    adapter: PlatformAdapter,
    options: ParserOptions | None = None,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Convert ``root`` with a fresh parser using the built-in rule set."""
    return Parser(adapter, options, emitter=emitter).parse(root)


__all__ = ["ParseMetadata", "ParseResult", "Parser", "convert", "degraded_output"]

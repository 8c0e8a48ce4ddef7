"""Conversion context primitives shared by the parser and the rules."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import time
from typing import TYPE_CHECKING, Any, TypeVar

from bs4.element import Tag

from . import dom
from .arena import ArenaCache, NodeArena
from .config import ParserOptions
from .diagnostics import DiagnosticEmitter
from .exceptions import BudgetExceededError, DepthExceededError, ParserError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from chatdown.adapters.base import LatexResult, PlatformAdapter

    from .rules import Rule


T = TypeVar("T")

NodeProcessor = Callable[[Any, "ConversionContext", int], str]


@dataclass(frozen=True, slots=True)
class ConversionIssue:
    """Recovered error recorded while converting a document."""

    message: str
    handler: str
    node_name: str = ""
    recovery: str = "fallback"

    def __str__(self) -> str:
        location = f" <{self.node_name}>" if self.node_name else ""
        return f"[{self.handler}]{location} {self.message}"


@dataclass(slots=True)
class ConversionContext:
    """State owned by a single ``parse()`` call.

    Counters, caches and collected diagnostics live here and nowhere else, so
    two conversions never observe each other's state.
    """

    options: ParserOptions
    adapter: PlatformAdapter
    emitter: DiagnosticEmitter
    arena: NodeArena
    started_at: float = field(default_factory=time.perf_counter)
    node_count: int = 0
    warnings: list[str] = field(default_factory=list)
    errors: list[ConversionIssue] = field(default_factory=list)
    resolutions: ArenaCache[Rule | None] = field(init=False)
    converted: ArenaCache[str] = field(init=False)

    def __post_init__(self) -> None:
        self.resolutions = ArenaCache(self.arena)
        self.converted = ArenaCache(self.arena)

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000.0

    def visit(self, node: Any, depth: int) -> None:
        """Account for one node visit, enforcing depth, count and time budgets."""
        if depth > self.options.max_depth:
            raise DepthExceededError(
                f"Max recursion depth ({self.options.max_depth}) exceeded",
                node,
                {"depth": depth},
            )

        self.node_count += 1
        if self.node_count > self.options.max_node_count:
            raise BudgetExceededError(
                f"Max nodes ({self.options.max_node_count}) exceeded",
                node,
                {"node_count": self.node_count},
            )

        elapsed = self.elapsed_ms()
        if elapsed > self.options.max_processing_time_ms:
            raise BudgetExceededError(
                f"Time budget ({self.options.max_processing_time_ms:g}ms) exceeded",
                node,
                {"elapsed_ms": round(elapsed, 2)},
            )

    def warn(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)
        self.emitter.warning(message, exc)

    def guard(
        self,
        action: Callable[[], T],
        fallback: Callable[[], T],
        *,
        node: Any,
        handler: str,
    ) -> T:
        """Run ``action``, returning ``fallback()`` if it fails.

        Abort-class :class:`ParserError` instances always propagate so that a
        budget violation unwinds the whole traversal.
        """
        try:
            return action()
        except ParserError as exc:
            if exc.is_abort:
                raise
            self.record_error(exc, node=node, handler=handler, recovery=exc.recovery.value)
            return fallback()
        except Exception as exc:  # noqa: BLE001 - every rule failure degrades locally
            self.record_error(exc, node=node, handler=handler)
            return fallback()

    def record_error(
        self,
        exc: BaseException,
        *,
        node: Any,
        handler: str,
        recovery: str = "fallback",
    ) -> None:
        """Store a recovered error, notify the emitter and the error callback."""
        issue = ConversionIssue(
            message=str(exc) or exc.__class__.__name__,
            handler=handler,
            node_name=dom.tag_name(node),
            recovery=recovery,
        )
        self.errors.append(issue)
        self.emitter.warning(f"Recovered from error in {issue}", exc)

        callback = self.options.on_error
        if callback is None:
            return
        try:
            callback(exc, {"handler": handler, "node": issue.node_name, "recovery": recovery})
        except Exception as callback_exc:  # noqa: BLE001 - callbacks never break a conversion
            self.emitter.error("Error callback raised an exception", callback_exc)


@dataclass(frozen=True, slots=True)
class RuleContext:
    """Per-node view handed to rule replacements."""

    node: Tag
    depth: int
    conversion: ConversionContext
    processor: NodeProcessor

    @property
    def adapter(self) -> PlatformAdapter:
        return self.conversion.adapter

    @property
    def options(self) -> ParserOptions:
        return self.conversion.options

    @property
    def emitter(self) -> DiagnosticEmitter:
        return self.conversion.emitter

    def process(self, node: Any) -> str:
        """Convert an arbitrary sub-node through the engine, one level deeper."""
        return self.processor(node, self.conversion, self.depth + 1)

    def process_children(self, node: Any | None = None) -> str:
        """Convert and concatenate the children of ``node`` (defaults to the rule node)."""
        target = self.node if node is None else node
        if not isinstance(target, Tag):
            return ""
        return "".join(self.process(child) for child in target.children)

    def closest(self, selector: str) -> Tag | None:
        return dom.closest(self.node, selector)

    def extract_latex(self, node: Tag | None = None) -> LatexResult | None:
        return self.adapter.extract_latex(self.node if node is None else node, emitter=self.emitter)

    def code_language(self, node: Tag) -> str:
        return self.adapter.get_code_language(node)

    def warn(self, message: str) -> None:
        self.conversion.warn(message)


__all__ = ["ConversionContext", "ConversionIssue", "NodeProcessor", "RuleContext"]

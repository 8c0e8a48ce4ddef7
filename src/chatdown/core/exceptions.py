"""Custom exception hierarchy for the Markdown conversion engine."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any


class ChatdownError(RuntimeError):
    """Base exception for conversion failures."""


class RuleConfigurationError(ChatdownError):
    """Raised when the rule table is wired incorrectly."""


class RuleConflictError(RuleConfigurationError):
    """Raised when two rules share a priority and can match the same node."""


class EngineSealedError(RuleConfigurationError):
    """Raised when a rule is registered after the engine has been sealed."""


class InvalidRuleError(RuleConfigurationError):
    """Raised when a rule declaration is malformed."""


class OptionsError(ChatdownError):
    """Raised when parser options cannot be loaded or validated."""


class RecoveryAction(str, Enum):
    """Recovery strategy attached to a :class:`ParserError`."""

    SKIP = "skip"
    FALLBACK = "fallback"
    ABORT = "abort"


class ParserError(ChatdownError):
    """Failure raised while converting a node.

    ``recovery`` tells the enclosing boundary what to do: ``skip`` and
    ``fallback`` errors are recovered where they are caught, ``abort`` errors
    unwind up to :meth:`chatdown.core.parser.Parser.parse`.
    """

    def __init__(
        self,
        message: str,
        node: Any = None,
        recovery: RecoveryAction = RecoveryAction.FALLBACK,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.node = node
        self.recovery = RecoveryAction(recovery)
        self.context: dict[str, Any] = dict(context or {})

    @property
    def is_abort(self) -> bool:
        return self.recovery is RecoveryAction.ABORT


class BudgetExceededError(ParserError):
    """Raised when the node-count or wall-clock budget is exhausted."""

    def __init__(
        self, message: str, node: Any = None, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message, node, RecoveryAction.ABORT, context)


class DepthExceededError(ParserError):
    """Raised when the recursion depth guard fires."""

    def __init__(
        self, message: str, node: Any = None, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message, node, RecoveryAction.ABORT, context)


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "BudgetExceededError",
    "ChatdownError",
    "DepthExceededError",
    "EngineSealedError",
    "InvalidRuleError",
    "OptionsError",
    "ParserError",
    "RecoveryAction",
    "RuleConfigurationError",
    "RuleConflictError",
    "exception_hint",
    "exception_messages",
]

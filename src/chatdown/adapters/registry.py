"""Explicit adapter registry.

The registry is an ordinary object: callers build one (usually through
:func:`default_registry`) and pass it where needed. Nothing in the package
keeps a module-level instance.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
import logging

from bs4.element import Tag

from chatdown.core.diagnostics import DiagnosticEmitter, NullEmitter

from .base import PlatformAdapter
from .chatgpt import ChatGPTAdapter
from .claude import ClaudeAdapter
from .deepseek import DeepseekAdapter
from .gemini import GeminiAdapter


logger = logging.getLogger(__name__)

AdapterFactory = Callable[[], PlatformAdapter]


class UnknownPlatformError(LookupError):
    """Raised when an adapter is requested under an unregistered name."""


@dataclass(frozen=True, slots=True)
class AdapterRegistration:
    name: str
    patterns: tuple[str, ...]
    factory: AdapterFactory


class AdapterRegistry:
    """Map hostnames, names and trees to platform adapters."""

    def __init__(self, default: AdapterFactory = ChatGPTAdapter) -> None:
        self._registrations: list[AdapterRegistration] = []
        self._default = default

    def register(
        self,
        factory: AdapterFactory,
        *,
        name: str | None = None,
        patterns: tuple[str, ...] | None = None,
    ) -> AdapterRegistry:
        """Register an adapter factory.

        ``name`` and ``patterns`` default to the adapter's ``name`` and
        ``hostnames`` class attributes.
        """
        resolved_name = name or getattr(factory, "name", None) or factory().name
        resolved_patterns = patterns
        if resolved_patterns is None:
            resolved_patterns = tuple(getattr(factory, "hostnames", ()))
        key = resolved_name.lower()
        self._registrations = [entry for entry in self._registrations if entry.name.lower() != key]
        self._registrations.append(
            AdapterRegistration(
                name=resolved_name,
                patterns=tuple(pattern.lower() for pattern in resolved_patterns),
                factory=factory,
            )
        )
        return self

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self._registrations]

    @property
    def patterns(self) -> list[str]:
        return [pattern for entry in self._registrations for pattern in entry.patterns]

    def __iter__(self) -> Iterator[AdapterRegistration]:
        return iter(self._registrations)

    def __len__(self) -> int:
        return len(self._registrations)

    def default(self) -> PlatformAdapter:
        return self._default()

    def by_name(self, name: str) -> PlatformAdapter:
        """Return a fresh adapter registered under ``name`` (case-insensitive)."""
        key = name.strip().lower()
        for entry in self._registrations:
            if entry.name.lower() == key:
                return entry.factory()
        known = ", ".join(self.names) or "<none>"
        raise UnknownPlatformError(f"Unknown platform '{name}'. Known platforms: {known}")

    def for_hostname(self, hostname: str | None) -> PlatformAdapter:
        """Return the adapter whose pattern occurs in ``hostname``, else the default."""
        if not hostname:
            logger.debug("No hostname given, using the default adapter")
            return self._default()
        host = hostname.lower()
        for entry in self._registrations:
            if any(pattern in host for pattern in entry.patterns):
                return entry.factory()
        logger.debug("No adapter registered for '%s', using the default adapter", hostname)
        return self._default()

    def detect(
        self,
        root: Tag,
        *,
        emitter: DiagnosticEmitter | None = None,
    ) -> PlatformAdapter:
        """Return the adapter scoring highest on ``root``.

        Ties keep registration order. When every adapter scores zero the
        default adapter is returned.
        """
        best: PlatformAdapter | None = None
        best_score = 0.0
        for entry in self._registrations:
            adapter = entry.factory()
            score = adapter.can_handle(root)
            if score > best_score:
                best, best_score = adapter, score
        chosen = best or self._default()
        (emitter or NullEmitter()).event(
            "adapter_detected",
            {"platform": chosen.name, "score": best_score},
        )
        return chosen


def default_registry() -> AdapterRegistry:
    """Return a registry holding the built-in adapters."""
    registry = AdapterRegistry(default=ChatGPTAdapter)
    for factory in (GeminiAdapter, ChatGPTAdapter, ClaudeAdapter, DeepseekAdapter):
        registry.register(factory)
    return registry


__all__ = [
    "AdapterFactory",
    "AdapterRegistration",
    "AdapterRegistry",
    "UnknownPlatformError",
    "default_registry",
]

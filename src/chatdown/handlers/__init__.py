"""Built-in conversion rules.

Each module groups related replacement functions declared with
:func:`~chatdown.core.rules.converts`. :func:`build_default_engine` collects
them into a fresh :class:`~chatdown.core.rules.RuleEngine`.
"""

from __future__ import annotations

from typing import Any

from chatdown.core.rules import RuleEngine

from . import blocks, code, inline, math, tables


BUILTIN_MODULES = (math, code, tables, blocks, inline)


def register_builtin_rules(engine: RuleEngine) -> RuleEngine:
    """Register every built-in rule on ``engine``."""
    for module in BUILTIN_MODULES:
        engine.collect_from(module)
    return engine


def build_default_engine(*extensions: Any) -> RuleEngine:
    """Return an unsealed engine holding the built-in rules plus ``extensions``.

    Extensions may be callables decorated with ``@converts`` or modules and
    objects exposing decorated attributes.
    """
    engine = register_builtin_rules(RuleEngine())
    for extension in extensions:
        if getattr(extension, "__conversion_rule__", None) is not None:
            engine.register(extension)
        else:
            engine.collect_from(extension)
    return engine


__all__ = ["BUILTIN_MODULES", "build_default_engine", "register_builtin_rules"]

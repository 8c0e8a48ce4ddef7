"""Rule declaration and resolution engine for the Markdown converter.

This module implements the rule-based architecture behind the HTML to
Markdown conversion. Replacement functions declare their intent through the
``@converts`` decorator, which records the node filter, the mandatory
priority, and a name. At setup time the :class:`RuleEngine` collects those
declarations into a single table sorted by priority, rejecting ambiguous
wiring eagerly, and is then sealed before the first conversion runs.

Architecture

`Declaration layer`
: ``@converts`` stores a lightweight :class:`RuleDefinition` on every
  replacement function.

`Filter layer`
: :class:`RuleFilter` normalises the three supported filter shapes: a CSS
  selector string, a collection of tag names, or a predicate over a node.

`Registry layer`
: :class:`RuleEngine` keeps the rules sorted ascending by priority, detects
  conflicts at registration, and resolves the winning rule for a node using
  a cache scoped to one conversion.

Conflict detection is conservative: two selector filters overlap only when
they are the same string, two tag sets overlap when they intersect, and
predicate filters are assumed never to overlap with anything. Rule authors
using predicates at a shared priority are responsible for keeping them
disjoint.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, cast

from bs4.element import Tag

from .arena import MISSING, ArenaCache
from .exceptions import EngineSealedError, InvalidRuleError, RuleConflictError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .context import RuleContext


Replacement = Callable[[str, Any, "RuleContext"], str]
NodePredicate = Callable[[Any], bool]
FilterSpec = str | Collection[str] | NodePredicate


class FilterKind(Enum):
    """Shape of a rule filter."""

    SELECTOR = "selector"
    TAGS = "tags"
    PREDICATE = "predicate"


@dataclass(frozen=True, slots=True)
class RuleFilter:
    """Normalised node filter attached to a rule."""

    kind: FilterKind
    selector: str | None = None
    tags: frozenset[str] = frozenset()
    predicate: NodePredicate | None = field(default=None, compare=False)

    @classmethod
    def coerce(cls, value: FilterSpec | RuleFilter) -> RuleFilter:
        """Build a filter from a selector, a tag collection, or a predicate."""
        if isinstance(value, RuleFilter):
            return value
        if isinstance(value, str):
            selector = value.strip()
            if not selector:
                raise InvalidRuleError("Selector filters cannot be empty")
            return cls(kind=FilterKind.SELECTOR, selector=selector)
        if callable(value):
            return cls(kind=FilterKind.PREDICATE, predicate=cast(NodePredicate, value))
        if isinstance(value, Iterable):
            tags = frozenset(str(tag).strip().lower() for tag in value)
            if not tags or "" in tags:
                raise InvalidRuleError("Tag filters need at least one non-empty tag name")
            return cls(kind=FilterKind.TAGS, tags=tags)
        raise InvalidRuleError(f"Unsupported rule filter: {value!r}")

    def matches(self, node: Any) -> bool:
        """Return True when ``node`` satisfies the filter."""
        if self.kind is FilterKind.PREDICATE:
            assert self.predicate is not None
            return bool(self.predicate(node))
        if not isinstance(node, Tag) or node.name == "[document]":
            return False
        if self.kind is FilterKind.TAGS:
            return (node.name or "").lower() in self.tags
        assert self.selector is not None
        return bool(node.css.match(self.selector))

    def overlaps(self, other: RuleFilter) -> bool:
        """Return True when both filters can provably match the same node."""
        if self.kind is FilterKind.SELECTOR and other.kind is FilterKind.SELECTOR:
            return self.selector == other.selector
        if self.kind is FilterKind.TAGS and other.kind is FilterKind.TAGS:
            return not self.tags.isdisjoint(other.tags)
        return False

    def describe(self) -> str:
        """Return a short human readable description."""
        if self.kind is FilterKind.SELECTOR:
            return str(self.selector)
        if self.kind is FilterKind.TAGS:
            return ", ".join(sorted(self.tags))
        name = getattr(self.predicate, "__name__", None) or type(self.predicate).__name__
        return f"<{name}>"


@dataclass(frozen=True, slots=True)
class Rule:
    """Concrete conversion rule registered in the engine."""

    name: str
    priority: int
    filter: RuleFilter
    replacement: Replacement = field(compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidRuleError("Rules must be named")
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise InvalidRuleError(
                f"Rule '{self.name}' must declare an integer priority, got {self.priority!r}"
            )
        if not callable(self.replacement):
            raise InvalidRuleError(f"Rule '{self.name}' has no callable replacement")
        if not isinstance(self.filter, RuleFilter):
            object.__setattr__(self, "filter", RuleFilter.coerce(self.filter))

    def matches(self, node: Any) -> bool:
        return self.filter.matches(node)


@dataclass(frozen=True)
class RuleDefinition:
    """Descriptor installed on replacement callables by the decorator."""

    filter: RuleFilter
    priority: int
    name: str | None = None

    def bind(self, replacement: Replacement) -> Rule:
        """Create a concrete rule bound to the callable."""
        name = self.name or getattr(replacement, "__name__", replacement.__class__.__name__)
        return Rule(name=name, priority=self.priority, filter=self.filter, replacement=replacement)


def converts(
    filter: FilterSpec,
    *,
    priority: int,
    name: str | None = None,
) -> Callable[[Replacement], Replacement]:
    """Decorator declaring a replacement function as a conversion rule."""
    definition = RuleDefinition(filter=RuleFilter.coerce(filter), priority=priority, name=name)

    def decorator(replacement: Replacement) -> Replacement:
        cast(Any, replacement).__conversion_rule__ = definition
        return replacement

    return decorator


ResolutionCache = ArenaCache["Rule | None"]


class RuleEngine:
    """Priority-ordered rule table.

    Registration is a build phase: once :meth:`seal` has been called the
    table is frozen and further additions raise :class:`EngineSealedError`.
    The engine itself keeps no per-node state; callers hand a
    :data:`ResolutionCache` to :meth:`find_rule` for the duration of one
    conversion.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: list[Rule] = []
        self._table: tuple[Rule, ...] = ()
        self._sealed = False
        for rule in rules:
            self.add_rule(rule)

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Registered rules in resolution order."""
        return self._table

    def add_rule(self, rule: Rule) -> RuleEngine:
        """Register a rule, rejecting conflicts with the existing table."""
        if self._sealed:
            raise EngineSealedError(
                f"Cannot register rule '{rule.name}': the rule engine is sealed"
            )
        for existing in self._rules:
            if existing.name == rule.name:
                raise RuleConflictError(f"A rule named '{rule.name}' is already registered")
            if existing.priority == rule.priority and existing.filter.overlaps(rule.filter):
                raise RuleConflictError(
                    f"Rule conflict: '{rule.name}' and '{existing.name}' both have "
                    f"priority {rule.priority} with overlapping filters"
                )
        self._rules.append(rule)
        # Stable sort keeps registration order between equal priorities.
        self._rules.sort(key=lambda item: item.priority)
        self._table = tuple(self._rules)
        return self

    def register(self, replacement: Replacement) -> RuleEngine:
        """Register a standalone callable decorated with ``@converts``."""
        definition = getattr(replacement, "__conversion_rule__", None)
        if not isinstance(definition, RuleDefinition):
            msg = "Replacement must be decorated with @converts"
            raise TypeError(msg)
        return self.add_rule(definition.bind(replacement))

    def collect_from(self, owner: Any) -> RuleEngine:
        """Collect decorated callables from a module or object, by priority."""
        collected: list[Rule] = []
        for attribute in dir(owner):
            replacement = getattr(owner, attribute)
            definition = getattr(replacement, "__conversion_rule__", None)
            if definition is None and hasattr(replacement, "__func__"):
                definition = getattr(replacement.__func__, "__conversion_rule__", None)
            if isinstance(definition, RuleDefinition):
                collected.append(definition.bind(replacement))
        for rule in sorted(collected, key=lambda item: (item.priority, item.name)):
            self.add_rule(rule)
        return self

    def seal(self) -> RuleEngine:
        """Freeze the rule table. Calling it twice is harmless."""
        self._sealed = True
        return self

    def find_rule(self, node: Any, cache: ResolutionCache | None = None) -> Rule | None:
        """Return the first rule, in priority order, whose filter matches ``node``."""
        if cache is not None:
            cached = cache.lookup(node)
            if cached is not MISSING:
                return cached

        resolved: Rule | None = None
        for rule in self._table:
            if rule.matches(node):
                resolved = rule
                break

        if cache is not None:
            cache.store(node, resolved)
        return resolved

    def describe(self) -> list[dict[str, object]]:
        """Return a serialisable snapshot of the registered rules."""
        return [
            {
                "order": order,
                "name": rule.name,
                "priority": rule.priority,
                "filter": rule.filter.kind.value,
                "matches": rule.filter.describe(),
            }
            for order, rule in enumerate(self._table)
        ]

    def __len__(self) -> int:
        return len(self._table)


__all__ = [
    "FilterKind",
    "FilterSpec",
    "Replacement",
    "ResolutionCache",
    "Rule",
    "RuleDefinition",
    "RuleEngine",
    "RuleFilter",
    "converts",
]

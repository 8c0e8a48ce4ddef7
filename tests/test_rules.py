from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup
import pytest

from chatdown.core.arena import ArenaCache, NodeArena
from chatdown.core.exceptions import EngineSealedError, InvalidRuleError, RuleConflictError
from chatdown.core.rules import FilterKind, Rule, RuleEngine, RuleFilter, converts
from chatdown.handlers import build_default_engine


def _identity(content: str, _node: Any, _context: Any) -> str:
    return content


def _rule(name: str, filter_spec: Any, priority: int) -> Rule:
    return Rule(
        name=name, priority=priority, filter=RuleFilter.coerce(filter_spec), replacement=_identity
    )


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def test_filter_coercion_kinds() -> None:
    assert RuleFilter.coerce("p.note").kind is FilterKind.SELECTOR
    assert RuleFilter.coerce({"P", "Div"}).tags == frozenset({"p", "div"})
    assert RuleFilter.coerce(lambda node: True).kind is FilterKind.PREDICATE


def test_filter_rejects_empty_declarations() -> None:
    with pytest.raises(InvalidRuleError):
        RuleFilter.coerce("   ")
    with pytest.raises(InvalidRuleError):
        RuleFilter.coerce(set())


def test_rule_requires_integer_priority() -> None:
    with pytest.raises(InvalidRuleError, match="integer priority"):
        Rule(name="bad", priority="1", filter=RuleFilter.coerce("p"), replacement=_identity)
    with pytest.raises(InvalidRuleError):
        Rule(name="flag", priority=True, filter=RuleFilter.coerce("p"), replacement=_identity)


def test_same_priority_identical_selector_conflicts() -> None:
    engine = RuleEngine([_rule("first", "p.note", 5)])
    with pytest.raises(RuleConflictError, match="'second' and 'first'"):
        engine.add_rule(_rule("second", "p.note", 5))


def test_same_priority_intersecting_tags_conflict() -> None:
    engine = RuleEngine([_rule("bold", {"b", "strong"}, 7)])
    with pytest.raises(RuleConflictError):
        engine.add_rule(_rule("strong-only", {"strong"}, 7))


def test_distinct_priorities_or_disjoint_filters_coexist() -> None:
    engine = RuleEngine()
    engine.add_rule(_rule("a", {"strong"}, 7))
    engine.add_rule(_rule("b", {"strong"}, 8))
    engine.add_rule(_rule("c", {"em"}, 7))
    engine.add_rule(_rule("d", lambda node: True, 7))
    engine.add_rule(_rule("e", lambda node: False, 7))
    assert len(engine) == 5


def test_duplicate_names_are_rejected() -> None:
    engine = RuleEngine([_rule("dup", {"p"}, 1)])
    with pytest.raises(RuleConflictError, match="already registered"):
        engine.add_rule(_rule("dup", {"h1"}, 2))


def test_rules_sorted_by_priority_with_stable_ties() -> None:
    engine = RuleEngine()
    engine.add_rule(_rule("late", {"p"}, 10))
    engine.add_rule(_rule("early", {"h1"}, 1))
    engine.add_rule(_rule("tie-a", {"em"}, 5))
    engine.add_rule(_rule("tie-b", {"strong"}, 5))
    assert [rule.name for rule in engine.rules] == ["early", "tie-a", "tie-b", "late"]


def test_sealed_engine_rejects_new_rules() -> None:
    engine = RuleEngine([_rule("p", {"p"}, 1)]).seal()
    assert engine.sealed
    with pytest.raises(EngineSealedError):
        engine.add_rule(_rule("h1", {"h1"}, 2))


def test_find_rule_returns_lowest_priority_match() -> None:
    soup = _soup("<p class='note'>x</p>")
    engine = RuleEngine()
    engine.add_rule(_rule("generic", {"p"}, 10))
    engine.add_rule(_rule("note", "p.note", 3))
    assert engine.find_rule(soup.p).name == "note"


def test_tag_and_selector_filters_skip_text_nodes() -> None:
    soup = _soup("<p>text</p>")
    engine = RuleEngine([_rule("tags", {"p"}, 1), _rule("css", "p", 2)])
    assert engine.find_rule(soup.p.string) is None
    assert engine.find_rule(soup) is None


def test_predicate_filters_see_every_node() -> None:
    soup = _soup("<p>text</p>")
    engine = RuleEngine([_rule("strings", lambda node: isinstance(node, str), 1)])
    assert engine.find_rule(soup.p.string).name == "strings"


def test_resolution_cache_is_scoped_to_its_arena() -> None:
    soup = _soup("<p>a</p><p>a</p>")
    first, second = soup.find_all("p")
    calls: list[Any] = []

    def counting(node: Any) -> bool:
        calls.append(node)
        return getattr(node, "name", None) == "p"

    engine = RuleEngine([_rule("p", counting, 1)])
    cache = ArenaCache(NodeArena.build(soup))
    engine.find_rule(first, cache)
    engine.find_rule(first, cache)
    engine.find_rule(second, cache)
    assert len(calls) == 2
    assert len(cache) == 2

    fresh = ArenaCache(NodeArena.build(soup))
    engine.find_rule(first, fresh)
    assert len(calls) == 3


def test_register_requires_decorated_callable() -> None:
    engine = RuleEngine()
    with pytest.raises(TypeError):
        engine.register(_identity)

    @converts({"mark"}, priority=20, name="highlight")
    def render_mark(content: str, _node: Any, _context: Any) -> str:
        return f"=={content}=="

    engine.register(render_mark)
    assert engine.rules[0].name == "highlight"


def test_collect_from_object_and_describe() -> None:
    class Extension:
        @staticmethod
        @converts("span.kbd", priority=3)
        def keyboard(content: str, _node: Any, _context: Any) -> str:
            return f"<kbd>{content}</kbd>"

    engine = RuleEngine().collect_from(Extension)
    snapshot = engine.describe()
    assert snapshot == [
        {
            "order": 0,
            "name": "keyboard",
            "priority": 3,
            "filter": "selector",
            "matches": "span.kbd",
        }
    ]


def test_default_engine_is_ordered_and_complete() -> None:
    engine = build_default_engine()
    names = [rule.name for rule in engine.rules]
    priorities = [rule.priority for rule in engine.rules]
    assert priorities == sorted(priorities)
    assert names[:4] == ["math-block", "math-inline", "code-block", "table"]
    for expected in (
        "heading",
        "list",
        "blockquote",
        "strong",
        "emphasis",
        "code-inline",
        "paragraph",
        "link",
        "image",
        "horizontal-rule",
        "line-break",
    ):
        assert expected in names


def test_default_engine_accepts_extensions() -> None:
    @converts({"mark"}, priority=20, name="highlight")
    def render_mark(content: str, _node: Any, _context: Any) -> str:
        return f"=={content}=="

    engine = build_default_engine(render_mark)
    assert engine.rules[-1].name == "highlight"
    assert not engine.sealed

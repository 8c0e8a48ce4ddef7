from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup
import pytest

from chatdown.adapters import ChatGPTAdapter
from chatdown.core.config import ParserOptions
from chatdown.core.context import ConversionContext
from chatdown.core.diagnostics import RecordingEmitter
from chatdown.core.exceptions import EngineSealedError
from chatdown.core.parser import Parser, convert
from chatdown.core.rules import RuleEngine, converts
from chatdown.handlers import build_default_engine


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def _parser(options: ParserOptions | None = None, **kwargs: Any) -> Parser:
    kwargs.setdefault("emitter", RecordingEmitter())
    return Parser(ChatGPTAdapter(), options, **kwargs)


def test_parse_is_deterministic() -> None:
    soup = _soup("<h2>Intro</h2><p>Some <strong>bold</strong> text.</p><ul><li>a</li></ul>")
    parser = _parser()
    first = parser.parse(soup)
    assert first == parser.parse(soup)
    assert first == _parser().parse(_soup(str(soup)))


def test_parse_does_not_mutate_input() -> None:
    soup = _soup("<p>Hello <em>world</em></p><pre><code>x = 1</code></pre>")
    before = str(soup)
    _parser().parse(soup)
    assert str(soup) == before


def test_unknown_wrappers_pass_children_through() -> None:
    soup = _soup("<section><div><p>hi</p></div><custom-tag>there</custom-tag></section>")
    assert _parser().parse(soup) == "hi\n\nthere"


def test_text_nodes_are_literal() -> None:
    assert _parser().parse(_soup("plain text")) == "plain text"


def test_comments_are_dropped() -> None:
    assert _parser().parse(_soup("<p>a<!-- hidden -->b</p>")) == "ab\n\n"


def test_depth_guard_degrades_to_text() -> None:
    markup = "<div>" * 150 + "deep content" + "</div>" * 150
    emitter = RecordingEmitter()
    result = _parser(emitter=emitter).parse_with_metadata(_soup(markup))

    assert result.markdown.startswith("<!-- Parser Max recursion depth (100) exceeded -->")
    assert result.markdown.endswith("deep content")
    assert result.metadata.aborted
    [event] = emitter.events_named("parse_aborted")
    assert event["depth"] == 101


def test_node_budget_degrades_to_text() -> None:
    markup = "".join(f"<p>item {index}</p>" for index in range(20))
    options = ParserOptions(max_node_count=10)
    result = _parser(options).parse_with_metadata(_soup(markup))

    assert result.markdown.startswith("<!-- Parser Max nodes (10) exceeded -->\n\n")
    assert "item 19" in result.markdown
    assert result.metadata.node_count == 11
    assert result.metadata.abort_reason == "Max nodes (10) exceeded"


def test_time_budget_degrades_to_text(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ConversionContext, "elapsed_ms", lambda self: 10_000.0)

    options = ParserOptions(max_processing_time_ms=1500)
    result = _parser(options).parse_with_metadata(_soup("<p>a</p><p>b</p>"))

    assert result.markdown.startswith("<!-- Parser Time budget (1500ms) exceeded -->")
    assert result.metadata.aborted


def test_failing_rule_falls_back_to_children() -> None:
    @converts({"em"}, priority=1, name="exploding")
    def explode(_content: str, _node: Any, _context: Any) -> str:
        raise ValueError("kaboom")

    seen: list[tuple[str, dict[str, Any]]] = []
    options = ParserOptions(on_error=lambda exc, info: seen.append((str(exc), info)))
    emitter = RecordingEmitter()
    parser = Parser(
        ChatGPTAdapter(), options, engine=build_default_engine(explode), emitter=emitter
    )
    result = parser.parse_with_metadata(_soup("<p>keep <em>this</em> text</p>"))

    assert result.markdown == "keep this text\n\n"
    assert not result.metadata.aborted
    [issue] = result.metadata.errors
    assert issue.handler == "exploding"
    assert issue.node_name == "em"
    assert seen == [("kaboom", {"handler": "exploding", "node": "em", "recovery": "fallback"})]
    assert any("kaboom" in message for message in emitter.warnings)


def test_failing_error_callback_is_contained() -> None:
    @converts({"em"}, priority=1, name="exploding")
    def explode(_content: str, _node: Any, _context: Any) -> str:
        raise ValueError("kaboom")

    def broken_callback(_exc: BaseException, _info: dict[str, Any]) -> None:
        raise RuntimeError("callback failure")

    emitter = RecordingEmitter()
    parser = Parser(
        ChatGPTAdapter(),
        ParserOptions(on_error=broken_callback),
        engine=build_default_engine(explode),
        emitter=emitter,
    )
    assert parser.parse(_soup("<em>x</em>")) == "x"
    assert emitter.errors == ["Error callback raised an exception"]


def test_unexpected_failure_never_escapes_parse() -> None:
    class BrokenAdapter(ChatGPTAdapter):
        def clean_text(self, text: str) -> str:
            raise RuntimeError("boom")

    result = Parser(BrokenAdapter(), emitter=RecordingEmitter()).parse_with_metadata(
        _soup("<p>still here</p>")
    )
    assert result.markdown == "<!-- Parser failed: boom -->\n\nstill here"
    assert result.metadata.aborted
    assert result.metadata.errors[0].handler == "parser"


def test_parser_seals_engine_and_reuses_it_safely() -> None:
    engine = build_default_engine()
    parser = Parser(ChatGPTAdapter(), engine=engine, emitter=RecordingEmitter())

    assert parser.parse(_soup("<p>a</p>")) == "a\n\n"
    assert parser.parse(_soup("<h1>a</h1>")) == "# a\n\n"
    assert engine.sealed
    with pytest.raises(EngineSealedError):
        engine.register(build_default_engine().rules[0].replacement)


def test_rule_context_can_process_other_nodes() -> None:
    @converts({"details"}, priority=1, name="details")
    def render_details(_content: str, node: Any, context: Any) -> str:
        summary = node.find("summary")
        body = [child for child in node.children if child is not summary]
        title = context.process_children(summary).strip()
        return f"**{title}**\n\n" + "".join(context.process(child) for child in body)

    engine = RuleEngine().register(render_details)
    parser = Parser(ChatGPTAdapter(), engine=engine, emitter=RecordingEmitter())
    markup = "<details><summary>More</summary>hidden text</details>"
    assert parser.parse(_soup(markup)) == "**More**\n\nhidden text"


def test_performance_event_is_emitted_on_request() -> None:
    emitter = RecordingEmitter()
    options = ParserOptions(enable_performance_logging=True)
    _parser(options, emitter=emitter).parse(_soup("<p>a</p>"))

    [payload] = emitter.events_named("parse_complete")
    assert payload["platform"] == "ChatGPT"
    assert payload["node_count"] == 3
    assert payload["aborted"] is False


def test_performance_event_is_silent_by_default() -> None:
    emitter = RecordingEmitter()
    _parser(emitter=emitter).parse(_soup("<p>a</p>"))
    assert emitter.events_named("parse_complete") == []


def test_convert_helper_uses_builtin_rules() -> None:
    assert convert(_soup("<h3>Title</h3>"), ChatGPTAdapter()) == "### Title\n\n"

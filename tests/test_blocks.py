from __future__ import annotations

from bs4 import BeautifulSoup
import pytest

from chatdown.adapters import ChatGPTAdapter
from chatdown.core.diagnostics import RecordingEmitter
from chatdown.core.parser import Parser


def _convert(markup: str) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    return Parser(ChatGPTAdapter(), emitter=RecordingEmitter()).parse(soup)


@pytest.mark.parametrize("level", range(1, 7))
def test_heading_levels(level: int) -> None:
    assert _convert(f"<h{level}>Title</h{level}>") == f"{'#' * level} Title\n\n"


def test_heading_collapses_whitespace_and_keeps_inline_markup() -> None:
    assert _convert("<h3>\n  A <em>fine</em>\n title </h3>") == "### A *fine* title\n\n"


def test_empty_heading_is_dropped() -> None:
    assert _convert("<h2>  </h2><p>x</p>") == "x\n\n"


def test_unordered_list() -> None:
    assert _convert("<ul><li>one</li><li>two</li></ul>") == "- one\n- two\n\n"


def test_ordered_list_honours_start() -> None:
    assert _convert('<ol start="3"><li>a</li><li>b</li></ol>') == "3. a\n4. b\n\n"
    assert _convert('<ol start="oops"><li>a</li></ol>') == "1. a\n\n"


def test_nested_list_indents_two_spaces_per_level() -> None:
    assert _convert("<ul><li>x<ul><li>y</li></ul></li></ul>") == "- x\n  - y\n\n"


def test_nested_list_in_indented_markup_stays_tight() -> None:
    markup = "<ul>\n <li>x\n <ul>\n  <li>y</li>\n </ul>\n </li>\n</ul>"
    assert _convert(markup) == "- x\n  - y\n\n"


def test_deeply_nested_mixed_lists() -> None:
    markup = (
        "<ol><li>first<ul><li>inner<ol><li>deepest</li></ol></li></ul></li>"
        "<li>second</li></ol>"
    )
    assert _convert(markup) == "1. first\n  - inner\n    1. deepest\n2. second\n\n"


def test_list_items_with_paragraphs() -> None:
    markup = "<ul><li><p>para <strong>bold</strong></p></li><li><p>next</p></li></ul>"
    assert _convert(markup) == "- para **bold**\n- next\n\n"


def test_blockquote_prefixes_every_line() -> None:
    assert _convert("<blockquote><p>a</p><p>b</p></blockquote>") == "> a\n>\n> b\n\n"


def test_paragraphs_are_separated() -> None:
    assert _convert("<p>  one </p><p>two</p><p> </p>") == "one\n\ntwo\n\n"


def test_horizontal_rule() -> None:
    assert _convert("<p>a</p><hr><p>b</p>") == "a\n\n\n---\n\nb\n\n"

from __future__ import annotations

from bs4 import BeautifulSoup

from chatdown.adapters import ChatGPTAdapter
from chatdown.core.diagnostics import RecordingEmitter
from chatdown.core.parser import Parser


def _convert(markup: str, emitter: RecordingEmitter | None = None) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    return Parser(ChatGPTAdapter(), emitter=emitter or RecordingEmitter()).parse(soup)


def test_strong_and_emphasis() -> None:
    assert _convert("<strong>bold</strong> and <em>it</em>") == "**bold** and *it*"
    assert _convert("<b>bold</b><i>it</i>") == "**bold***it*"


def test_markers_keep_whitespace_outside() -> None:
    assert _convert("a<strong> b </strong>c") == "a **b** c"
    assert _convert("<em> </em>") == " "


def test_nested_inline_markup() -> None:
    assert _convert("<strong>very <em>important</em></strong>") == "**very *important***"


def test_inline_code() -> None:
    assert _convert("Use <code>pip install</code> now") == "Use `pip install` now"


def test_inline_code_with_backticks() -> None:
    assert _convert("<code>a`b</code>") == "``a`b``"
    assert _convert("<code>`tick</code>") == "`` `tick ``"


def test_empty_inline_code_is_dropped() -> None:
    assert _convert("x<code></code>y") == "xy"


def test_links() -> None:
    assert _convert('<a href="https://example.org">site</a>') == "[site](https://example.org)"
    assert _convert('<a href="https://example.org"></a>') == (
        "[https://example.org](https://example.org)"
    )
    assert _convert("<a>anchor</a>") == "anchor"


def test_unsafe_links_keep_their_text() -> None:
    emitter = RecordingEmitter()
    assert _convert('<a href=" JavaScript:alert(1)">click</a>', emitter) == "click"
    assert emitter.warnings == ["Dropped unsafe link target on 'click'"]


def test_images() -> None:
    assert _convert('<img src="cat.png" alt="A cat">') == "![A cat](cat.png)"
    assert _convert('<img src="cat.png">') == "![](cat.png)"
    assert _convert('<img alt="missing">') == "missing"


def test_line_break() -> None:
    assert _convert("line<br>next") == "line  \nnext"

from __future__ import annotations

from bs4 import BeautifulSoup

from chatdown.adapters import ChatGPTAdapter, DeepseekAdapter, GeminiAdapter, PlatformAdapter
from chatdown.core.diagnostics import RecordingEmitter
from chatdown.core.parser import Parser
from chatdown.handlers.code import code_fence, normalize_code


def _convert(markup: str, adapter: PlatformAdapter | None = None) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    return Parser(adapter or ChatGPTAdapter(), emitter=RecordingEmitter()).parse(soup)


def test_common_indentation_is_stripped() -> None:
    markup = (
        '<pre><code class="language-python">'
        "\n    a = 1\n    if a:\n        b = 2\n</code></pre>"
    )
    assert _convert(markup) == "```python\na = 1\nif a:\n    b = 2\n```\n\n"


def test_normalize_code_line_endings_and_blank_edges() -> None:
    assert normalize_code("\r\n  x\r\n\r\n  y\r\n") == "x\n\ny"
    assert normalize_code("\n\nkeep\n\n") == "\nkeep\n"
    assert normalize_code("no indent\n  child") == "no indent\n  child"


def test_fence_grows_past_inner_backticks() -> None:
    assert code_fence("plain") == "```"
    assert code_fence("````") == "`````"


def test_code_without_language() -> None:
    assert _convert("<pre><code>echo hi</code></pre>") == "```\necho hi\n```\n\n"


def test_code_content_is_not_converted() -> None:
    markup = "<pre><code><strong>not bold</strong> &lt;tag&gt;</code></pre>"
    assert _convert(markup) == "```\nnot bold <tag>\n```\n\n"


def test_code_inside_block_is_not_inline_code() -> None:
    result = _convert("<p>before</p><pre><code>`x`</code></pre>")
    assert result == "before\n\n```\n`x`\n```\n\n"


def test_gemini_code_block_drops_decoration() -> None:
    markup = (
        '<div class="code-block"><div class="code-block-decoration"><span>Python</span>'
        "<button>Copy</button></div><pre><code>print(1)</code></pre></div>"
    )
    assert _convert(markup, GeminiAdapter()) == "```python\nprint(1)\n```"


def test_deepseek_code_block_without_code_element() -> None:
    markup = (
        '<div class="md-code-block"><div class="md-code-block-banner">'
        '<span class="md-code-block-infostring">bash</span></div><pre>ls -la</pre></div>'
    )
    assert _convert(markup, DeepseekAdapter()) == "```bash\nls -la\n```\n\n"

"""Platform adapter contract and the shared LaTeX extraction chain.

Each chat platform renders math and code slightly differently. Adapters hide
those differences behind one interface consumed by the conversion rules:

- ``extract_latex`` recovers the LaTeX source of a rendered formula;
- ``get_code_language`` finds the language hint of a code block;
- ``is_block_math`` tells display formulas from inline ones;
- ``clean_text`` post-processes the final document;
- ``can_handle`` scores how well the adapter fits a given tree.

LaTeX extraction runs an ordered chain of strategies. The first candidate
passing :func:`validate_latex` wins; a strategy that raises is logged and
skipped. When every strategy declines, the node's own markup is returned so
that no content is ever dropped.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import re
from typing import ClassVar

from bs4.element import Tag

from chatdown.core import dom
from chatdown.core.diagnostics import DiagnosticEmitter, NullEmitter
from chatdown.core.entities import decode_entities, encode_entities

from .mathml import mathml_to_latex


DEFAULT_MAX_LATEX_LENGTH = 10_000

TEX_ANNOTATION_SELECTOR = 'annotation[encoding="application/x-tex"]'
CODE_LANGUAGE_ATTRIBUTES = ("data-language", "data-lang", "data-code-language")
CODE_LANGUAGE_PREFIXES = ("language-", "lang-")

_INJECTION_MARKERS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"\bon[a-z]{3,}\s*=", re.IGNORECASE),
)
_KATEX_ERROR_PREFIX = re.compile(r"^ParseError:.*?:\s*", re.IGNORECASE)
_LANGUAGE_TOKEN = re.compile(r"^[A-Za-z0-9_+\-#.]+$")
_MAX_LANGUAGE_LABEL = 20


@dataclass(frozen=True, slots=True)
class LatexResult:
    """LaTeX recovered from a math node."""

    latex: str
    is_block: bool
    strategy: str = "markup"

    @property
    def is_markup(self) -> bool:
        """True when no strategy succeeded and ``latex`` holds raw markup."""
        return self.strategy == "markup"


LatexStrategy = Callable[[Tag], "LatexResult | None"]


def find_injection(candidate: str) -> str | None:
    """Return the first script-injection marker found in ``candidate``."""
    for pattern in _INJECTION_MARKERS:
        match = pattern.search(candidate)
        if match is not None:
            return match.group(0)
    return None


def validate_latex(candidate: str | None, *, max_length: int = DEFAULT_MAX_LATEX_LENGTH) -> bool:
    """Return True when ``candidate`` is acceptable LaTeX output.

    >>> validate_latex("x^2")
    True
    >>> validate_latex("   ")
    False
    >>> validate_latex("<script>alert(1)</script>")
    False
    """
    if not candidate or not candidate.strip():
        return False
    if len(candidate) > max_length:
        return False
    return find_injection(candidate) is None


def language_from_classes(node: Tag | None) -> str:
    """Return the language encoded in a ``language-*`` or ``lang-*`` class."""
    for cls in dom.gather_classes(node.get("class") if node is not None else None):
        for prefix in CODE_LANGUAGE_PREFIXES:
            if cls.startswith(prefix) and len(cls) > len(prefix):
                return cls[len(prefix) :]
    return ""


def language_from_label(text: str | None) -> str:
    """Return a normalised language name when ``text`` looks like a single token."""
    label = (text or "").strip()
    if not label or len(label) >= _MAX_LANGUAGE_LABEL:
        return ""
    if not _LANGUAGE_TOKEN.match(label):
        return ""
    return label.lower()


class PlatformAdapter:
    """Base class for platform adapters.

    Subclasses mostly tune class attributes; the extraction chain itself is
    shared. Adapters are stateless and may be reused across conversions.
    """

    name: ClassVar[str] = "Generic"
    hostnames: ClassVar[tuple[str, ...]] = ()
    max_latex_length: ClassVar[int] = DEFAULT_MAX_LATEX_LENGTH

    math_selector: ClassVar[str] = ".katex, .katex-display"
    code_selector: ClassVar[str] = "pre > code"
    display_classes: ClassVar[tuple[str, ...]] = ("katex-display",)
    latex_attributes: ClassVar[tuple[str, ...]] = ("data-latex-source", "data-math")

    code_wrapper_selectors: ClassVar[tuple[str, ...]] = ("pre", ".code-block")
    # (container selector, label selector) pairs searched for a language label.
    code_label_selectors: ClassVar[tuple[tuple[str, str], ...]] = ()
    # (selector, weight) pairs used to score the fit with a tree.
    signals: ClassVar[tuple[tuple[str, float], ...]] = ()

    # -- node selection --------------------------------------------------

    def select_math_nodes(self, root: Tag) -> list[Tag]:
        return list(root.select(self.math_selector))

    def select_code_blocks(self, root: Tag) -> list[Tag]:
        return list(root.select(self.code_selector))

    # -- LaTeX extraction ------------------------------------------------

    def latex_strategies(self) -> tuple[tuple[str, LatexStrategy], ...]:
        """Return the extraction strategies in the order they are tried."""
        return (
            ("annotation", self.latex_from_annotation),
            ("attribute", self.latex_from_attribute),
            ("katex-error", self.latex_from_katex_error),
            ("mathml", self.latex_from_mathml),
            ("text", self.latex_from_text),
        )

    def extract_latex(
        self, node: Tag, *, emitter: DiagnosticEmitter | None = None
    ) -> LatexResult | None:
        """Recover the LaTeX source of a rendered formula."""
        if not isinstance(node, Tag):
            return None
        emitter = emitter or NullEmitter()

        for strategy_name, strategy in self.latex_strategies():
            try:
                result = strategy(node)
            except Exception as exc:  # noqa: BLE001 - a failing strategy only declines
                emitter.warning(
                    f"[{self.name}] LaTeX extraction strategy '{strategy_name}' failed: {exc}",
                    exc,
                )
                continue
            if result is not None and self.validate_latex(result.latex):
                return result

        return self._markup_fallback(node, emitter)

    def validate_latex(self, candidate: str | None) -> bool:
        return validate_latex(candidate, max_length=self.max_latex_length)

    def latex_from_annotation(self, node: Tag) -> LatexResult | None:
        annotation = node.select_one(TEX_ANNOTATION_SELECTOR)
        if annotation is None:
            return None
        latex = annotation.get_text().strip()
        if not latex:
            return None
        return LatexResult(latex, self.is_block_math(node), "annotation")

    def latex_from_attribute(self, node: Tag) -> LatexResult | None:
        for attribute in self.latex_attributes:
            value = dom.get_attribute(node, attribute)
            if value and value.strip():
                return LatexResult(value.strip(), self.is_block_math(node), "attribute")
        return None

    def latex_from_katex_error(self, node: Tag) -> LatexResult | None:
        error = node if dom.has_class(node, "katex-error") else node.select_one(".katex-error")
        if error is None:
            return None
        text = decode_entities(error.get_text().strip())
        text = _KATEX_ERROR_PREFIX.sub("", text, count=1).strip()
        if not text:
            return None
        return LatexResult(text, "\\begin{" in text or self.is_block_math(node), "katex-error")

    def latex_from_mathml(self, node: Tag) -> LatexResult | None:
        math = node if dom.tag_name(node) == "math" else node.find("math")
        if not isinstance(math, Tag):
            return None
        latex = mathml_to_latex(math)
        if not latex:
            return None
        return LatexResult(latex, self.is_block_math(node), "mathml")

    def latex_text_source(self, node: Tag) -> Tag:
        """Return the element whose text serves as the last-resort LaTeX."""
        return node

    def latex_from_text(self, node: Tag) -> LatexResult | None:
        text = self.latex_text_source(node).get_text().strip()
        if not text:
            return None
        return LatexResult(text, self.is_block_math(node), "text")

    def _markup_fallback(self, node: Tag, emitter: DiagnosticEmitter) -> LatexResult:
        markup = dom.outer_html(node)
        marker = find_injection(markup)
        if marker is not None:
            emitter.warning(
                f"[{self.name}] Dropped markup of math node carrying '{marker}'; kept escaped text"
            )
            markup = encode_entities(node.get_text())
            strategy = "escaped-text"
        else:
            strategy = "markup"
        emitter.event(
            "latex_fallback",
            {"platform": self.name, "strategy": strategy, "node": dom.tag_name(node)},
        )
        return LatexResult(markup, self.is_block_math(node), "markup")

    # -- block detection and code languages --------------------------------

    def is_block_math(self, node: Tag) -> bool:
        """Return True when ``node`` or one of its ancestors is display math."""
        if dom.has_class(node, *self.display_classes):
            return True
        ancestor = dom.find_ancestor(node, lambda tag: dom.has_class(tag, *self.display_classes))
        return ancestor is not None

    def code_wrappers(self, code: Tag) -> list[Tag]:
        """Return the block wrappers enclosing ``code``, nearest first."""
        wrappers: list[Tag] = []
        for selector in self.code_wrapper_selectors:
            wrapper = dom.closest(code, selector)
            if wrapper is not None and wrapper is not code and all(
                wrapper is not seen for seen in wrappers
            ):
                wrappers.append(wrapper)
        return wrappers

    def get_code_language(self, code: Tag) -> str:
        """Return the language of a code block, or an empty string."""
        candidates = [code, *self.code_wrappers(code)]

        for candidate in candidates:
            language = language_from_classes(candidate)
            if language:
                return language

        for candidate in candidates:
            for attribute in CODE_LANGUAGE_ATTRIBUTES:
                value = dom.get_attribute(candidate, attribute)
                if value and value.strip():
                    return value.strip().lower()

        for container_selector, label_selector in self.code_label_selectors:
            container = dom.closest(code, container_selector)
            if container is None:
                continue
            label = container.select_one(label_selector)
            language = language_from_label(label.get_text() if label is not None else None)
            if language:
                return language

        return ""

    # -- output and detection -------------------------------------------

    def clean_text(self, text: str) -> str:
        return text

    def can_handle(self, root: Tag) -> float:
        """Return a confidence score in ``[0, 1]`` that ``root`` comes from this platform."""
        if not isinstance(root, Tag):
            return 0.0
        score = sum(weight for selector, weight in self.signals if root.select_one(selector))
        return min(round(score, 4), 1.0)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = [
    "CODE_LANGUAGE_ATTRIBUTES",
    "DEFAULT_MAX_LATEX_LENGTH",
    "LatexResult",
    "LatexStrategy",
    "PlatformAdapter",
    "find_injection",
    "language_from_classes",
    "language_from_label",
    "validate_latex",
]

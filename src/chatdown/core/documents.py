"""Loading and pre-filtering of chat transcripts before conversion.

The conversion engine never mutates its input. Anything that needs to reshape
the tree, such as dropping toolbar buttons or screen-reader labels, happens
here on a copy, before a :class:`~chatdown.core.parser.Parser` sees it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup, FeatureNotFound
from bs4.element import Tag

from .diagnostics import DiagnosticEmitter, NullEmitter


NoiseRule = tuple[str, tuple[str, ...], str]

NOISE_MODES = frozenset({"unwrap", "extract", "decompose"})

NOISE_NODES: tuple[NoiseRule, ...] = (
    ("script", (), "decompose"),
    ("style", (), "decompose"),
    ("noscript", (), "decompose"),
    ("template", (), "decompose"),
    ("button", (), "extract"),
    ("svg", (), "extract"),
    ("span", ("sr-only",), "extract"),
    ("div", ("sr-only",), "extract"),
    ("span", ("visually-hidden",), "extract"),
)


def load_html(
    source: str | bytes | Path,
    *,
    parser: str = "lxml",
    emitter: DiagnosticEmitter | None = None,
) -> BeautifulSoup:
    """Parse markup into a BeautifulSoup tree.

    ``source`` may be markup or a path to a file. When the preferred parser
    backend is unavailable the built-in ``html.parser`` is used instead.
    """
    if isinstance(source, Path):
        markup: str | bytes = source.read_bytes()
    else:
        markup = source

    try:
        return BeautifulSoup(markup, parser)
    except FeatureNotFound:
        if parser == "html.parser":
            raise
        (emitter or NullEmitter()).event(
            "parser_fallback", {"preferred": parser, "fallback": "html.parser"}
        )
        return BeautifulSoup(markup, "html.parser")


def merge_noise_rules(overrides: Mapping[str, Any] | None = None) -> list[NoiseRule]:
    """Merge the default noise rules with user overrides.

    Overrides map a tag name to a mode string or to a mapping with ``mode``
    and ``classes`` keys. Unknown modes are ignored.
    """
    rules: dict[tuple[str, tuple[str, ...]], str] = {
        (tag, classes): mode for tag, classes, mode in NOISE_NODES
    }
    for tag, payload in (overrides or {}).items():
        if isinstance(payload, str):
            mode = payload
            classes: tuple[str, ...] = ()
        elif isinstance(payload, Mapping):
            mode = payload.get("mode", "extract")
            classes_value = payload.get("classes", ())
            classes = (classes_value,) if isinstance(classes_value, str) else tuple(classes_value)
        else:
            continue
        if mode not in NOISE_MODES:
            continue
        rules[(tag, classes)] = mode
    return [(tag, classes, mode) for (tag, classes), mode in rules.items()]


def strip_noise(root: Tag, rules: Iterable[NoiseRule] | None = None) -> Tag:
    """Return a copy of ``root`` with interface chrome removed."""
    cleaned = copy.copy(root)
    for tag, classes, mode in NOISE_NODES if rules is None else rules:
        class_filter = list(classes)
        candidates = (
            cleaned.find_all(tag, class_=class_filter) if class_filter else cleaned.find_all(tag)
        )
        for node in candidates:
            if mode == "unwrap":
                node.unwrap()
            elif mode == "extract":
                node.extract()
            elif mode == "decompose":
                node.decompose()
    return cleaned


def select_root(soup: Tag, selector: str | None = None) -> Tag:
    """Narrow a document to the first element matching ``selector``.

    Without a selector the ``<body>`` is returned when present, otherwise the
    document itself.
    """
    if selector:
        found = soup.select_one(selector)
        if found is None:
            raise LookupError(f"No element matches selector '{selector}'")
        return found
    body = soup.find("body")
    return body if isinstance(body, Tag) else soup


__all__ = [
    "NOISE_NODES",
    "NoiseRule",
    "load_html",
    "merge_noise_rules",
    "select_root",
    "strip_noise",
]

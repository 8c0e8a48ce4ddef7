"""HTML preview of converted Markdown.

Rendering Markdown is delegated to Python-Markdown; math is kept intact for a
client-side renderer through ``pymdownx.arithmatex`` in generic mode, which
wraps formulas in ``\\(...\\)`` and ``\\[...\\]`` spans.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import html

import markdown

from chatdown.core.exceptions import ChatdownError


DEFAULT_PREVIEW_EXTENSIONS: tuple[str, ...] = (
    "tables",
    "fenced_code",
    "pymdownx.arithmatex",
)

DEFAULT_EXTENSION_CONFIGS: dict[str, dict[str, object]] = {
    "pymdownx.arithmatex": {"generic": True},
}

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


class PreviewError(ChatdownError):
    """Raised when Markdown cannot be rendered to HTML."""


def render_preview(
    source: str,
    *,
    extensions: Sequence[str] | None = None,
    extension_configs: Mapping[str, Mapping[str, object]] | None = None,
    standalone: bool = False,
    title: str = "chatdown preview",
) -> str:
    """Render Markdown produced by the converter into HTML."""
    active = list(DEFAULT_PREVIEW_EXTENSIONS if extensions is None else extensions)
    configs = {key: dict(value) for key, value in DEFAULT_EXTENSION_CONFIGS.items()}
    for key, value in (extension_configs or {}).items():
        configs[key] = {**configs.get(key, {}), **value}

    try:
        processor = markdown.Markdown(
            extensions=active,
            extension_configs={key: value for key, value in configs.items() if key in active},
        )
        body = processor.convert(source)
    except Exception as exc:  # noqa: BLE001 - library-controlled failures
        raise PreviewError(f"Failed to render Markdown preview: {exc}") from exc

    if not standalone:
        return body
    return _DOCUMENT_TEMPLATE.format(title=html.escape(title), body=body)


__all__ = [
    "DEFAULT_PREVIEW_EXTENSIONS",
    "PreviewError",
    "render_preview",
]

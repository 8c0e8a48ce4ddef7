"""Filesystem helpers used by CLI commands."""

from __future__ import annotations

from pathlib import Path


def write_output_file(target: Path, content: str) -> None:
    """Persist text content to disk, creating parent directories as needed."""
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem errors
        raise OSError(f"Failed to write output to '{target}': {exc}") from exc


def normalise_selector(selector: str | None) -> str | None:
    """Strip surrounding quotes and whitespace from user-provided selectors."""
    if selector is None:
        return None
    value = selector.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        value = value[1:-1].strip()
    return value or None


__all__ = ["normalise_selector", "write_output_file"]

"""CLI command implementations exposed via `chatdown.ui.cli`."""

from __future__ import annotations

from .convert import convert
from .rules import list_rules


__all__ = ["convert", "list_rules"]

"""Configuration models used by the Markdown parser.

ParserOptions

`max_node_count` (`int`)
: Upper bound on the number of nodes visited during one conversion. Every
  visited node counts, whether a rule matched it or not. Defaults to 50,000.

`max_processing_time_ms` (`float`)
: Wall-clock budget for one conversion, checked on every node visit.
  Defaults to 5,000 milliseconds.

`max_depth` (`int`)
: Maximum recursion depth. The depth counter is threaded explicitly through
  the traversal instead of relying on the interpreter stack. Defaults to 100.

`enable_performance_logging` (`bool`)
: Emit a `parse_complete` diagnostic event with node counts and timings once
  a conversion finishes.

`on_error` (`Callable[[BaseException, dict], None] | None`)
: Callback invoked for every recovered error with the exception and a small
  mapping describing the failing node and handler.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import yaml

from .exceptions import OptionsError


ErrorCallback = Callable[[BaseException, dict[str, Any]], None]

DEFAULT_MAX_NODE_COUNT = 50_000
DEFAULT_MAX_PROCESSING_TIME_MS = 5_000.0
DEFAULT_MAX_DEPTH = 100


class ParserOptions(BaseModel):
    """Construction-time options controlling budgets and diagnostics."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_node_count: int = Field(default=DEFAULT_MAX_NODE_COUNT, gt=0)
    max_processing_time_ms: float = Field(default=DEFAULT_MAX_PROCESSING_TIME_MS, gt=0)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, gt=0)
    enable_performance_logging: bool = False
    on_error: ErrorCallback | None = Field(default=None, exclude=True)

    def merged(self, **overrides: Any) -> ParserOptions:
        """Return a copy with the non-``None`` overrides applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        try:
            return self.model_validate({**self.model_dump(), "on_error": self.on_error, **values})
        except ValidationError as exc:
            raise OptionsError(f"Invalid parser options: {exc}") from exc


def options_from_mapping(data: Mapping[str, Any]) -> ParserOptions:
    """Validate a raw mapping into :class:`ParserOptions`."""
    payload = data.get("parser", data) if isinstance(data, Mapping) else data
    if not isinstance(payload, Mapping):
        raise OptionsError("Parser options must be a mapping")
    try:
        return ParserOptions.model_validate(dict(payload))
    except ValidationError as exc:
        raise OptionsError(f"Invalid parser options: {exc}") from exc


def load_options(path: Path | str) -> ParserOptions:
    """Load parser options from a YAML or JSON file.

    The file may hold the options at its top level or under a ``parser`` key.
    """
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise OptionsError(f"Unable to read options file '{source}': {exc}") from exc

    try:
        if source.suffix.lower() == ".json":
            data = json.loads(text) if text.strip() else {}
        else:
            data = yaml.safe_load(text) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise OptionsError(f"Unable to parse options file '{source}': {exc}") from exc

    return options_from_mapping(data)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_NODE_COUNT",
    "DEFAULT_MAX_PROCESSING_TIME_MS",
    "ErrorCallback",
    "ParserOptions",
    "load_options",
    "options_from_mapping",
]

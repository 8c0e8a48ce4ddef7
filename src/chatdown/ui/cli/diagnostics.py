"""Diagnostic emitter bridging the conversion engine with CLI rendering utilities."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from chatdown.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_info, emit_warning, get_cli_state


_ALWAYS_SHOWN = frozenset({"parse_complete", "parse_aborted"})


class CliEmitter:
    """Emit diagnostics using the rich-enabled CLI helpers.

    Warnings from individual nodes are only shown from verbosity level 1
    upwards; errors and summary events are always shown.
    """

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self._state = state or get_cli_state()
        if debug_enabled is None:
            debug_enabled = self._state.show_tracebacks
        self.debug_enabled = bool(debug_enabled)
        self.warning_count = 0

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warning_count += 1
        if self._state.verbosity >= 1:
            emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        data = dict(payload)
        self._state.record_event(name, data)
        message = format_event_message(name, data)
        if message and (self._state.verbosity >= 1 or name in _ALWAYS_SHOWN):
            emit_info(message)


__all__ = ["CliEmitter"]

"""Diagnostic abstractions shared across the conversion engine."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None and self.debug_enabled:
            self._logger.warning(message, exc_info=exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


class RecordingEmitter:
    """Emitter keeping every diagnostic in memory, mostly for tests and tooling."""

    def __init__(self, *, debug_enabled: bool = False) -> None:
        self.debug_enabled = debug_enabled
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))

    def events_named(self, name: str) -> list[dict[str, Any]]:
        """Return the payloads recorded for ``name``."""
        return [payload for event, payload in self.events if event == name]


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "parse_complete":
        nodes = data.get("node_count", 0)
        elapsed = float(data.get("processing_time_ms") or 0.0)
        platform = data.get("platform") or "<unknown>"
        details: list[str] = [f"platform={platform}"]
        if data.get("warnings"):
            details.append(f"warnings={data['warnings']}")
        if data.get("errors"):
            details.append(f"errors={data['errors']}")
        return f"Processed {nodes} nodes in {elapsed:.2f}ms ({', '.join(details)})"

    if name == "parse_aborted":
        reason = data.get("reason") or "budget exceeded"
        return f"Conversion aborted: {reason}"

    if name == "latex_fallback":
        strategy = data.get("strategy") or "markup"
        adapter = data.get("platform") or "<unknown>"
        return f"All LaTeX strategies declined on {adapter}; kept {strategy}"

    if name == "adapter_detected":
        adapter = data.get("platform") or "<unknown>"
        score = data.get("score")
        suffix = f" (confidence {float(score):.2f})" if score is not None else ""
        return f"Using {adapter} adapter{suffix}"

    return None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "RecordingEmitter",
    "format_event_message",
]

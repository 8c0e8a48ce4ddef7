from __future__ import annotations

import logging

import pytest

from chatdown.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    RecordingEmitter,
    format_event_message,
)
from chatdown.core.exceptions import (
    BudgetExceededError,
    DepthExceededError,
    ParserError,
    RecoveryAction,
    exception_hint,
    exception_messages,
)
from chatdown.ui.cli.diagnostics import CliEmitter
from chatdown.ui.cli.state import CLIState


def test_emitters_satisfy_protocol() -> None:
    for emitter in (NullEmitter(), LoggingEmitter(), RecordingEmitter()):
        assert isinstance(emitter, DiagnosticEmitter)


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("nothing to see")
        emitter.error("still quiet")
    assert not caplog.records
    emitter.event("ignored", {"value": 1})
    assert emitter.debug_enabled is False


def test_logging_emitter_logs_messages(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(debug_enabled=True)
    with caplog.at_level(logging.INFO):
        emitter.error("boom")
        emitter.event("parse_aborted", {"reason": "Max nodes (10) exceeded"})
    messages = [record.message for record in caplog.records]
    assert "boom" in messages
    assert "Conversion aborted: Max nodes (10) exceeded" in messages


def test_format_event_messages() -> None:
    assert format_event_message(
        "parse_complete",
        {"platform": "Claude", "node_count": 12, "processing_time_ms": 1.5, "warnings": 2},
    ) == "Processed 12 nodes in 1.50ms (platform=Claude, warnings=2)"
    assert format_event_message("adapter_detected", {"platform": "Gemini", "score": 0.6}) == (
        "Using Gemini adapter (confidence 0.60)"
    )
    assert format_event_message("latex_fallback", {"platform": "ChatGPT"}) == (
        "All LaTeX strategies declined on ChatGPT; kept markup"
    )
    assert format_event_message("custom", {}) is None


def test_parser_error_recovery_actions() -> None:
    error = ParserError("bad node", recovery="skip", context={"rule": "x"})
    assert error.recovery is RecoveryAction.SKIP
    assert not error.is_abort
    assert error.context == {"rule": "x"}
    assert BudgetExceededError("over").is_abort
    assert DepthExceededError("deep").recovery is RecoveryAction.ABORT


def test_exception_chain_helpers() -> None:
    try:
        try:
            raise ValueError("root cause")
        except ValueError as exc:
            raise ParserError("wrapper failed") from exc
    except ParserError as exc:
        assert exception_messages(exc) == ["wrapper failed", "root cause"]
        assert exception_hint(exc) == "root cause"


def test_cli_emitter_respects_verbosity(capsys: pytest.CaptureFixture[str]) -> None:
    quiet = CliEmitter(CLIState(verbosity=0))
    quiet.warning("hidden warning")
    quiet.event("adapter_detected", {"platform": "Claude", "score": 0.5})
    quiet.event("parse_aborted", {"reason": "Max nodes (5) exceeded"})
    quiet.error("visible error")

    captured = capsys.readouterr()
    assert "hidden warning" not in captured.err
    assert "Using Claude adapter" not in captured.err
    assert "Conversion aborted" in captured.err
    assert "visible error" in captured.err
    assert captured.out == ""
    assert quiet.warning_count == 1

    verbose = CliEmitter(CLIState(verbosity=1))
    verbose.warning("shown warning")
    assert "shown warning" in capsys.readouterr().err

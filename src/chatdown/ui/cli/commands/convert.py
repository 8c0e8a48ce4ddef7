"""Implementation of the `chatdown convert` command."""

from __future__ import annotations

from pathlib import Path

from bs4.element import Tag
import typer

from chatdown.adapters.base import PlatformAdapter
from chatdown.adapters.registry import AdapterRegistry, UnknownPlatformError, default_registry
from chatdown.core.config import ParserOptions, load_options
from chatdown.core.documents import load_html, select_root, strip_noise
from chatdown.core.exceptions import OptionsError
from chatdown.core.parser import Parser
from chatdown.preview import PreviewError, render_preview

from .._options import (
    ConfigOption,
    DebugOption,
    HostnameOption,
    InputPathArgument,
    KeepNoiseOption,
    MaxDepthOption,
    MaxNodesOption,
    MaxTimeOption,
    OutputPathOption,
    ParserBackendOption,
    PlatformOption,
    PreviewOption,
    SelectorOption,
    TimingsOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..state import emit_error, emit_warning, set_cli_state
from ..utils import normalise_selector, write_output_file


def _resolve_options(
    config: Path | None,
    *,
    max_nodes: int | None,
    max_time_ms: float | None,
    max_depth: int | None,
    timings: bool,
) -> ParserOptions:
    options = load_options(config) if config is not None else ParserOptions()
    return options.merged(
        max_node_count=max_nodes,
        max_processing_time_ms=max_time_ms,
        max_depth=max_depth,
        enable_performance_logging=True if timings else None,
    )


def _resolve_adapter(
    registry: AdapterRegistry,
    root: Tag,
    *,
    platform: str,
    hostname: str | None,
    emitter: CliEmitter,
) -> PlatformAdapter:
    if hostname:
        return registry.for_hostname(hostname)
    if platform.strip().lower() == "auto":
        return registry.detect(root, emitter=emitter)
    try:
        return registry.by_name(platform)
    except UnknownPlatformError as exc:
        raise typer.BadParameter(str(exc), param_hint="--platform") from exc


def convert(
    input_path: InputPathArgument,
    output: OutputPathOption = None,
    platform: PlatformOption = "auto",
    hostname: HostnameOption = None,
    selector: SelectorOption = None,
    keep_noise: KeepNoiseOption = False,
    parser: ParserBackendOption = "lxml",
    config: ConfigOption = None,
    max_nodes: MaxNodesOption = None,
    max_time_ms: MaxTimeOption = None,
    max_depth: MaxDepthOption = None,
    timings: TimingsOption = False,
    preview: PreviewOption = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Convert a saved chat transcript from HTML into Markdown."""
    state = set_cli_state(verbosity=verbose, debug=debug)
    emitter = CliEmitter(state)

    try:
        options = _resolve_options(
            config,
            max_nodes=max_nodes,
            max_time_ms=max_time_ms,
            max_depth=max_depth,
            timings=timings,
        )
    except OptionsError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    soup = load_html(input_path, parser=parser, emitter=emitter)
    try:
        root = select_root(soup, normalise_selector(selector))
    except LookupError as exc:
        raise typer.BadParameter(str(exc), param_hint="--selector") from exc
    if not keep_noise:
        root = strip_noise(root)

    adapter = _resolve_adapter(
        default_registry(), root, platform=platform, hostname=hostname, emitter=emitter
    )
    result = Parser(adapter, options, emitter=emitter).parse_with_metadata(root)

    if output is not None:
        write_output_file(output, result.markdown)
    else:
        typer.echo(result.markdown)

    if preview is not None:
        try:
            write_output_file(preview, render_preview(result.markdown, standalone=True))
        except PreviewError as exc:
            emit_error(str(exc), exception=exc)
            raise typer.Exit(code=1) from exc

    if result.metadata.errors and state.verbosity < 1:
        emit_warning(
            f"Recovered from {len(result.metadata.errors)} conversion error(s); "
            "rerun with -v for details."
        )


__all__ = ["convert"]

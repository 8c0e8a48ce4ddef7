"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
PLATFORM_PANEL = "Platform"
BUDGET_PANEL = "Budgets"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

InputPathArgument = Annotated[
    Path,
    typer.Argument(
        metavar="INPUT",
        help="HTML file holding a saved chat transcript or a single message.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

SelectorOption = Annotated[
    str | None,
    typer.Option(
        "--selector",
        help="CSS selector narrowing the document to the element to convert.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

KeepNoiseOption = Annotated[
    bool,
    typer.Option(
        "--keep-noise",
        help="Do not strip scripts, buttons and screen-reader labels before converting.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

ParserBackendOption = Annotated[
    str,
    typer.Option(
        "--parser",
        help="BeautifulSoup parser backend used to read the input.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

PlatformOption = Annotated[
    str,
    typer.Option(
        "--platform",
        "-p",
        help="Platform adapter to use (chatgpt, claude, gemini, deepseek) or 'auto'.",
        rich_help_panel=PLATFORM_PANEL,
    ),
]

HostnameOption = Annotated[
    str | None,
    typer.Option(
        "--hostname",
        help="Pick the adapter from the hostname the transcript was saved from.",
        rich_help_panel=PLATFORM_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML or JSON file holding parser options.",
        exists=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=BUDGET_PANEL,
    ),
]

MaxNodesOption = Annotated[
    int | None,
    typer.Option(
        "--max-nodes",
        min=1,
        help="Maximum number of nodes visited before the conversion is aborted.",
        rich_help_panel=BUDGET_PANEL,
    ),
]

MaxTimeOption = Annotated[
    float | None,
    typer.Option(
        "--max-time-ms",
        min=1,
        help="Wall-clock budget of a conversion, in milliseconds.",
        rich_help_panel=BUDGET_PANEL,
    ),
]

MaxDepthOption = Annotated[
    int | None,
    typer.Option(
        "--max-depth",
        min=1,
        help="Maximum nesting depth followed by the converter.",
        rich_help_panel=BUDGET_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Write the Markdown to this file instead of standard output.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

PreviewOption = Annotated[
    Path | None,
    typer.Option(
        "--preview",
        help="Also write an HTML preview of the converted Markdown to this file.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

TimingsOption = Annotated[
    bool,
    typer.Option(
        "--timings",
        help="Report node counts and processing time once the conversion finishes.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

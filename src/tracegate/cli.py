"""Typer CLI entrypoint for tracegate."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from tracegate.artifacts.loader import TraceRequest, TraceRootsError, build_trace_report
from tracegate.artifacts.refs import (
    EventPayloadError,
    append_step_summary,
    check_references,
    extract_references,
    pr_body_from_event,
    render_reference_summary,
)
from tracegate.artifacts.types import TraceReport
from tracegate.config import (
    TraceConfig,
    TraceConfigError,
    default_config_file,
    load_trace_config,
)
from tracegate.reporting import (
    EXIT_FAILED,
    EXIT_OK,
    exit_code_for,
    render_report,
    report_payload,
)

app = typer.Typer(
    name="tracegate",
    help="Validate spec -> plan -> task traceability.",
    add_completion=False,
)
_CONSOLE = Console()
_LOGGING_CONFIGURED = False
_LOGGER = logging.getLogger(__name__)

RepoRootOption = Annotated[
    Path,
    typer.Option(help="Repository root path."),
]
DirOption = Annotated[
    Path | None,
    typer.Option(file_okay=False, dir_okay=True, help="Collection root override."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        file_okay=True,
        dir_okay=False,
        help="Path to tracegate config YAML/JSON file.",
    ),
]
VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
]


def _configure_logging(verbose: bool) -> None:
    """Configure Rich-backed logging once for CLI commands."""
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True), show_path=False, rich_tracebacks=True
            )
        ],
    )
    _LOGGING_CONFIGURED = True


def _build_request(
    *,
    repo_root: Path,
    config_file: Path | None,
    specs_dir: Path | None,
    plans_dir: Path | None,
    tasks_dir: Path | None,
) -> TraceRequest:
    """Merge config file values with CLI overrides.

    Args:
        repo_root: Repository root path.
        config_file: Optional config file override.
        specs_dir: Optional specs root override.
        plans_dir: Optional plans root override.
        tasks_dir: Optional tasks root override.

    Returns:
        Validation request with resolved roots.
    """
    effective_root = repo_root.resolve()
    config: TraceConfig = load_trace_config(
        config_file or default_config_file(effective_root)
    )
    overrides = {
        name: value
        for name, value in (
            ("specs_dir", specs_dir),
            ("plans_dir", plans_dir),
            ("tasks_dir", tasks_dir),
        )
        if value is not None
    }
    if overrides:
        config = config.model_copy(update=overrides)
    return TraceRequest.from_config(effective_root, config)


def _run_report(
    *,
    repo_root: Path,
    config_file: Path | None,
    specs_dir: Path | None = None,
    plans_dir: Path | None = None,
    tasks_dir: Path | None = None,
) -> TraceReport | None:
    """Build the report, printing structural failures instead of raising."""
    try:
        request = _build_request(
            repo_root=repo_root,
            config_file=config_file,
            specs_dir=specs_dir,
            plans_dir=plans_dir,
            tasks_dir=tasks_dir,
        )
        return build_trace_report(request)
    except (TraceConfigError, TraceRootsError) as exc:
        _CONSOLE.print(f"[red]Traceability validation aborted:[/red] {exc}")
        return None


def _emit(report: TraceReport, *, json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps(report_payload(report), indent=2, sort_keys=True))
        return
    render_report(_CONSOLE, report)


@app.command("check")
def check_command(  # noqa: PLR0913
    repo_root: RepoRootOption = Path("."),
    specs_dir: DirOption = None,
    plans_dir: DirOption = None,
    tasks_dir: DirOption = None,
    config_file: ConfigOption = None,
    json_output: Annotated[
        bool, typer.Option("--json", help="Print the report as JSON.")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Validate every spec, plan and task document and gate on the result.

    Args:
        repo_root: Repository root the collections live under.
        specs_dir: Optional specs root override.
        plans_dir: Optional plans root override.
        tasks_dir: Optional tasks root override.
        config_file: Optional config file override.
        json_output: Whether to print JSON instead of the Rich summary.
        verbose: Whether to enable debug logging.

    Raises:
        Exit: Raised with ``0`` on success and ``1`` on any violation.
    """
    _configure_logging(verbose)
    report = _run_report(
        repo_root=repo_root,
        config_file=config_file,
        specs_dir=specs_dir,
        plans_dir=plans_dir,
        tasks_dir=tasks_dir,
    )
    if report is None:
        raise typer.Exit(code=EXIT_FAILED)
    _emit(report, json_output=json_output)
    raise typer.Exit(code=exit_code_for(report))


@app.command("refs")
def refs_command(  # noqa: PLR0913
    body_file: Annotated[
        Path | None,
        typer.Option(
            file_okay=True,
            dir_okay=False,
            help="File holding the pull request body.",
        ),
    ] = None,
    event_file: Annotated[
        Path | None,
        typer.Option(
            envvar="GITHUB_EVENT_PATH",
            file_okay=True,
            dir_okay=False,
            help="GitHub event payload to read the pull request body from.",
        ),
    ] = None,
    summary_file: Annotated[
        Path | None,
        typer.Option(
            envvar="GITHUB_STEP_SUMMARY",
            file_okay=True,
            dir_okay=False,
            help="Step summary file to append the reference list to.",
        ),
    ] = None,
    repo_root: RepoRootOption = Path("."),
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Check artifact ids referenced by a pull request, then run the full check.

    A body without references is a lightweight change and passes without
    further validation.

    Args:
        body_file: Optional pull request body file.
        event_file: Optional GitHub event payload file.
        summary_file: Optional step summary file.
        repo_root: Repository root the collections live under.
        config_file: Optional config file override.
        verbose: Whether to enable debug logging.

    Raises:
        Exit: Raised with ``0`` on success and ``1`` on any violation.
    """
    _configure_logging(verbose)
    try:
        if body_file is not None:
            body = body_file.read_text(encoding="utf-8")
        elif event_file is not None:
            body = pr_body_from_event(event_file)
        else:
            body = ""
        config = load_trace_config(
            config_file or default_config_file(repo_root.resolve())
        )
    except (OSError, EventPayloadError, TraceConfigError) as exc:
        _CONSOLE.print(f"[red]Reference check aborted:[/red] {exc}")
        raise typer.Exit(code=EXIT_FAILED) from exc

    references = extract_references(body, config.reference_pattern)
    if not references:
        _CONSOLE.print("No artifact references found; reference check skipped.")
        raise typer.Exit(code=EXIT_OK)
    _LOGGER.debug("Found references: %s", ", ".join(references))

    report = _run_report(repo_root=repo_root, config_file=config_file)
    if report is None:
        raise typer.Exit(code=EXIT_FAILED)

    missing = check_references(references, report.records)
    for ref in references:
        if all(diag.artifact_id != ref for diag in missing):
            _CONSOLE.print(f"Found artifact: {ref}", markup=False, highlight=False)
    for diag in missing:
        _CONSOLE.print(f"- {diag.render()}", markup=False, highlight=False)
    render_report(_CONSOLE, report)

    if missing or not report.is_valid:
        raise typer.Exit(code=EXIT_FAILED)
    summary = render_reference_summary(references)
    _CONSOLE.print(summary, markup=False, highlight=False)
    if summary_file is not None:
        append_step_summary(summary, summary_file)
    raise typer.Exit(code=EXIT_OK)


def main() -> None:
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()

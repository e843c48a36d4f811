"""Typer-based CLI for corpuslint."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .baseline import BaselineError
from .config_manager import ConfigError, LintOptions, load_options
from .crossfile import CrossFileValidator
from .discovery import DiscoveryCache, discover_documents
from .import_graph import build_import_graph, format_import_cycle
from .models import ValidationIssue
from .pipeline import PipelineResult, ValidationPipeline

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="🔗 corpuslint: cross-document consistency checks with issue baselines.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_SEVERITY_STYLE = {
    "error": "red",
    "warning": "yellow",
    "suggestion": "cyan",
    "info": "blue",
}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"corpuslint v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """corpuslint: find circular imports, broken references, and new issues only."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_options(root: Path) -> LintOptions:
    try:
        return load_options(root)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _print_issue(issue: ValidationIssue) -> None:
    style = _SEVERITY_STYLE.get(issue.severity, "white")
    location = f"{issue.file}:{issue.line}" if issue.line else issue.file
    console.print(
        f"  [{style}]{issue.severity:<10}[/{style}] {issue.message} [dim]({location})[/dim]",
        highlight=False,
    )


def _render_console(outcome: PipelineResult) -> None:
    summary = outcome.summary
    for result in summary.results:
        issues = result.all_issues()
        if not issues:
            continue
        marker = "[green]✓[/green]" if result.success else "[red]✗[/red]"
        console.print(f"{marker} [bold]{result.file}[/bold] [dim]({result.doc_type})[/dim]")
        for issue in issues:
            _print_issue(issue)

    console.print(
        f"\n{summary.total_files} files: {summary.successful_files} passed, "
        f"{summary.failed_files} failed | {summary.total_errors} errors, "
        f"{summary.total_warnings} warnings, {summary.total_suggestions} suggestions"
    )
    if outcome.baseline_created:
        console.print(f"\nBaseline created: {outcome.baseline_path} ({outcome.baseline_size} issues)")
    elif outcome.stats.total_ignored:
        console.print(
            f"\n{outcome.stats.total_ignored} baseline issues ignored "
            f"({outcome.stats.errors_ignored} errors, {outcome.stats.suggestions_ignored} suggestions)"
        )


def _render_json(outcome: PipelineResult) -> None:
    payload = {
        "summary": asdict(outcome.summary),
        "baseline": {
            "path": str(outcome.baseline_path) if outcome.baseline_path else None,
            "loaded": outcome.baseline_loaded,
            "created": outcome.baseline_created,
            "fingerprints": outcome.baseline_size,
            "ignored": asdict(outcome.stats),
        },
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command("lint")
def lint(
    root: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Corpus root directory."),
    files: Optional[List[Path]] = typer.Option(
        None, "--file", "-f", help="Lint only these documents (cross-file state still uses the whole corpus)."
    ),
    use_baseline: bool = typer.Option(False, "--baseline", help="Ignore issues recorded in the baseline file."),
    create_baseline: bool = typer.Option(
        False, "--baseline-create", help="Write a fresh baseline from the current issues."
    ),
    baseline_path: Optional[str] = typer.Option(
        None, "--baseline-path", help="Baseline file, relative to the corpus root."
    ),
    no_cycle_check: Optional[bool] = typer.Option(
        None, "--no-cycle-check/--cycle-check", help="Skip circular @import detection."
    ),
    fmt: str = typer.Option("console", "--format", help="Output format: console or json."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only set the exit code."),
):
    """Lint the corpus and report issues not covered by the baseline."""
    fmt = fmt.lower()
    if fmt not in {"console", "json"}:
        raise typer.BadParameter("Format must be one of: console, json")

    options = _load_options(root).merged(
        use_baseline=use_baseline,
        create_baseline=create_baseline,
        baseline_path=baseline_path,
        no_cycle_check=no_cycle_check,
    )
    pipeline = ValidationPipeline(root, options=options)

    try:
        outcome = pipeline.lint_files(files) if files else pipeline.run()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except BaselineError as exc:
        err_console.print(f"[red]❌ {exc}[/red]")
        raise typer.Exit(code=2)

    if not quiet:
        if fmt == "json":
            _render_json(outcome)
        else:
            _render_console(outcome)

    raise typer.Exit(code=outcome.exit_code)


@app.command("cycles")
def cycles(
    root: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Corpus root directory."),
):
    """List circular @import chains in the corpus."""
    options = _load_options(root)
    documents = DiscoveryCache(lambda r: discover_documents(r, exclude=options.exclude)).get(root)
    found = build_import_graph(documents).detect_cycles()

    if not found:
        typer.echo("No circular imports found.")
        raise typer.Exit(code=0)

    for cycle in found:
        typer.echo(f"- {format_import_cycle(cycle)}")
    raise typer.Exit(code=1)


@app.command("refs")
def refs(
    root: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Corpus root directory."),
):
    """Show resolved, phantom and orphaned reference files per document."""
    options = _load_options(root)
    documents = DiscoveryCache(lambda r: discover_documents(r, exclude=options.exclude)).get(root)
    validator = CrossFileValidator(documents, root, doc_types=options.reference_types)

    if not validator.documents:
        typer.echo("No documents with reference checks found.")
        raise typer.Exit(code=0)

    table = Table(title="Reference files")
    table.add_column("Document", style="bold")
    table.add_column("Resolved", style="green")
    table.add_column("Phantom", style="red")
    table.add_column("Orphaned", style="yellow")

    broken = False
    for document in validator.documents:
        state = validator.state_for(document)
        broken = broken or bool(state.phantom)
        table.add_row(
            document.rel_path,
            ", ".join(sorted(state.resolved)) or "-",
            ", ".join(sorted(state.phantom)) or "-",
            ", ".join(sorted(state.orphaned)) or "-",
        )
    console.print(table)
    raise typer.Exit(code=1 if broken else 0)


if __name__ == "__main__":
    app()

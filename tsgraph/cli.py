"""Typer-based CLI for the tsgraph code graph extractor."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from . import __version__, config_manager
from .engine import AnalyzerEngine
from .errors import AnalysisError
from .graph_export import dependencies, export_dot, export_json, load_graph
from .models import ProgressEvent

app = typer.Typer(
    help="Extract a code graph (folders, files, functions, classes, calls) from TS/JS projects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

_STAGE_LABELS = {
    "scan": "Scanning files...",
    "symbols": "Building symbol registry...",
    "calls": "Resolving calls...",
    "assemble": "Assembling graph...",
}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"tsgraph v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    )
):
    """tsgraph: static code graphs for TypeScript and JavaScript projects."""
    pass


def _summary_table(graph) -> Table:
    table = Table(title="Code graph", title_style="bold cyan")
    table.add_column("Item", style="yellow")
    table.add_column("Count", justify="right")

    for kind, count in sorted(Counter(n.kind for n in graph.nodes).items()):
        table.add_row(f"nodes: {kind}", str(count))
    for relation, count in sorted(Counter(e.relation for e in graph.edges).items()):
        table.add_row(f"edges: {relation}", str(count))
    table.add_row("warnings", str(len(graph.warnings)))
    return table


@app.command("analyze")
def analyze(
    root: Path = typer.Argument(..., help="Project root to analyze."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the graph to this file."),
    fmt: str = typer.Option("json", "--format", "-f", help="Output format: json or dot."),
    focus: str = typer.Option("", "--focus", help="DOT only: restrict to nodes matching this text."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """Analyze a project and print a summary of its code graph."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    fmt = fmt.lower()
    if fmt not in ("json", "dot"):
        console.print(f"[red]Unknown format: {fmt}[/red] Use json or dot.")
        raise typer.Exit(code=1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(_STAGE_LABELS["scan"], total=None)

        def on_progress(event: ProgressEvent) -> None:
            progress.update(
                task,
                description=_STAGE_LABELS.get(event.stage, event.stage),
                completed=event.processed,
                total=event.total or None,
            )

        try:
            graph = AnalyzerEngine(root, progress=on_progress).analyze()
        except AnalysisError as exc:
            progress.stop()
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            raise typer.Exit(code=1)

    console.print(_summary_table(graph))
    for warning in graph.warnings:
        console.print(f"  [yellow]warning[/yellow] {warning.path}: {warning.message}")

    if output is not None:
        try:
            if fmt == "dot":
                export_dot(graph, output, focus=focus)
            else:
                export_json(graph, output)
        except OSError as exc:
            console.print(f"[red]Could not write {output}:[/red] {escape(str(exc))}")
            raise typer.Exit(code=1)
        console.print(f"[green]Wrote {fmt} graph to[/green] {output}")


@app.command("deps")
def deps(
    graph_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Graph JSON written by 'analyze'."),
    node_id: str = typer.Argument(..., help="Node id, e.g. file:src/a.ts:fn:foo"),
):
    """Show incoming and outgoing edges of a node."""
    graph = load_graph(graph_file)
    if graph.get_node(node_id) is None:
        console.print(f"[red]Node '{node_id}' not found.[/red]")
        raise typer.Exit(code=1)

    result = dependencies(graph, node_id)
    console.print(f"[bold]{node_id}[/bold]")
    console.print(f"Incoming ({len(result['incoming'])}):")
    for edge in result["incoming"]:
        console.print(f"  {edge.source} [dim]--{edge.relation}-->[/dim]")
    console.print(f"Outgoing ({len(result['outgoing'])}):")
    for edge in result["outgoing"]:
        suffix = f" x{edge.call_count}" if edge.call_count and edge.call_count > 1 else ""
        console.print(f"  [dim]--{edge.relation}{suffix}-->[/dim] {edge.target}")


@app.command("show-config")
def show_config():
    """Show current analyzer settings."""
    settings = config_manager.load_settings()
    exists = config_manager.CONFIG_FILE.exists()

    table = Table(show_header=False, box=None, padding=(0, 2), title="Analyzer settings", title_style="bold cyan")
    table.add_column(style="yellow", min_width=22)
    table.add_column()
    table.add_row("file_content_limit", str(settings.file_content_limit))
    table.add_row("symbol_content_limit", str(settings.symbol_content_limit))
    table.add_row("extra_skip_dirs", ", ".join(settings.extra_skip_dirs) or "-")
    table.add_row("extra_skip_extensions", ", ".join(settings.extra_skip_extensions) or "-")
    console.print(table)

    source = str(config_manager.CONFIG_FILE) if exists else "defaults (no config file)"
    console.print(f"[dim]Source: {source}[/dim]")


@app.command("set-config")
def set_config(
    key: str = typer.Argument(..., help="Setting name, e.g. symbol_content_limit."),
    value: str = typer.Argument(..., help="New value; comma-separated for lists."),
):
    """Persist one analyzer setting."""
    try:
        config_manager.update_setting(key, value)
    except KeyError:
        console.print(f"[red]Unknown setting: {key}[/red]")
        raise typer.Exit(code=1)
    except ValueError as exc:
        console.print(f"[red]Invalid value for {key}:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    except OSError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Saved[/green] {key} = {value}")


if __name__ == "__main__":
    app()

"""digraph CLI - typer application entry point."""

from __future__ import annotations

import atexit
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from digraph.config import ConfigError, DigraphConfig, load_config
from digraph.graph import DiGraph, create_graph
from digraph.observability import close_file_logging, configure_logging, get_logger
from digraph.result import Failure, Success

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="dg",
    help="digraph: inspect and rewrite persistent graph documents.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

log = get_logger(__name__)

# Global state set by the callback, used by commands
_config: DigraphConfig = DigraphConfig()

PrettyOption = Annotated[
    bool,
    typer.Option("--pretty", help="Indent output with two spaces (default: config json.pretty)."),
]
CompactOption = Annotated[
    bool,
    typer.Option("--compact", help="Write the most compact JSON (overrides config)."),
]


def _resolve_pretty(pretty: bool, compact: bool) -> bool:
    """Pick the output style from flags, falling back to config."""
    if pretty and compact:
        err_console.print("[red]Error:[/red] --pretty and --compact are mutually exclusive")
        raise typer.Exit(2)
    if pretty or compact:
        return pretty
    return _config.pretty


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="YAML config file (default: ./digraph.yaml if present).",
            envvar="DIGRAPH_CONFIG",
        ),
    ] = None,
) -> None:
    """digraph: inspect and rewrite persistent graph documents."""
    global _config
    try:
        _config = load_config(config)
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    configure_logging(verbosity=max(verbose, _config.verbosity), log_file=_config.log_file)
    if _config.log_file is not None:
        atexit.register(close_file_logging)


def _load_graph(path: Path) -> DiGraph[Any, Any]:
    """Read and parse a graph document, exiting with status 1 on failure."""
    if not path.exists():
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)

    result = DiGraph.from_json(path.read_bytes())
    if isinstance(result, Failure):
        err_console.print(f"[red]Error:[/red] {path}: {result.error}")
        raise typer.Exit(1)

    graph = result.value
    log.info("graph_loaded", path=str(path), graph_id=graph.id)
    return graph


def _write_graph(graph: DiGraph[Any, Any], output: Path | None, pretty: bool) -> None:
    """Serialize *graph* to *output* (or stdout), exiting with status 1 on failure."""
    match graph.to_json(pretty=pretty):
        case Success(text):
            if output is None:
                typer.echo(text)
            else:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(text + "\n", encoding="utf-8")
                console.print(f"[green]✓[/green] Wrote {output}")
        case Failure(error):
            err_console.print(f"[red]Error:[/red] {error}")
            raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from digraph import __version__

    console.print(f"digraph v{__version__}")


@app.command()
def new(
    output: Annotated[Path, typer.Argument(help="File to write the empty graph to.")],
    graph_id: Annotated[
        str | None,
        typer.Option("--id", help="Graph id (default: random)."),
    ] = None,
    pretty: PrettyOption = False,
    compact: CompactOption = False,
) -> None:
    """Write an empty graph document."""
    if output.exists():
        err_console.print(f"[red]Error:[/red] '{output}' already exists")
        raise typer.Exit(1)
    _write_graph(create_graph(graph_id=graph_id), output, _resolve_pretty(pretty, compact))


@app.command()
def info(
    file: Annotated[Path, typer.Argument(help="Graph JSON document.")],
) -> None:
    """Show identity and counts of a graph document."""
    graph = _load_graph(file)

    table = Table(title=f"Graph {graph.id}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="bold")

    table.add_row("created", graph.created)
    table.add_row("nodes", str(graph.node_count()))
    table.add_row("edges", str(graph.edge_count()))
    table.add_row("orphans", str(len(graph.orphans())))
    table.add_row("bad edges", str(len(graph.bad_edges())))
    error = graph.error
    table.add_row("error", f"[red]{error}[/red]" if error is not None else "-")

    console.print()
    console.print(table)
    console.print()


@app.command()
def check(
    file: Annotated[Path, typer.Argument(help="Graph JSON document.")],
) -> None:
    """Check adjacency invariants. Exits with status 1 on any violation."""
    graph = _load_graph(file)
    violations = graph.validate_invariants()
    error = graph.error

    if error is not None:
        console.print(f"[red]✗[/red] Graph has failed: {error}")
    if not violations:
        console.print(f"[green]✓[/green] No invariant violations in {file}")
    else:
        console.print(f"[red]✗[/red] {len(violations)} violation(s) in {file}:")
        for violation in violations:
            console.print(f"  - {violation}", markup=False)

    if violations or error is not None:
        raise typer.Exit(1)


@app.command()
def fmt(
    file: Annotated[Path, typer.Argument(help="Graph JSON document.")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write here instead of stdout."),
    ] = None,
    pretty: PrettyOption = False,
    compact: CompactOption = False,
) -> None:
    """Re-encode a graph document."""
    _write_graph(_load_graph(file), output, _resolve_pretty(pretty, compact))

"""CLI entry point for texas-vaccine-supply."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pandas as pd
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable

from vaccine_supply import REQUIRED_COLUMNS, __version__
from vaccine_supply.chart import build_supply_chart
from vaccine_supply.errors import PipelineError, WriteError
from vaccine_supply.export import export_artifacts
from vaccine_supply.io import load_providers
from vaccine_supply.models import SupplyReport
from vaccine_supply.pipeline import summarize_supply

app = typer.Typer(
    name="txvax",
    help="texas-vaccine-supply: statewide vaccine supply chart + CSV from provider data.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {escape(msg)}")


def _fail(exc: PipelineError) -> None:
    _err(f"[{exc.stage}] {exc}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"texas-vaccine-supply v{__version__}")
        raise typer.Exit()


def _supply_table(supply_long: pd.DataFrame) -> RichTable:
    tbl = RichTable(title="Texas Vaccine Supply", show_lines=True)
    tbl.add_column("Vaccine Type", style="bold")
    tbl.add_column("Supply", justify="right")
    for row in supply_long.itertuples(index=False):
        tbl.add_row(str(row.vaccine_type), f"{row.supply:,}")
    tbl.add_row("Total", f"{supply_long['supply'].sum():,}", style="dim")
    return tbl


def _load_and_summarize(
    source: str, *, lenient: bool, echo: Callable[..., None]
) -> tuple[pd.DataFrame, SupplyReport]:
    """Load + aggregate, exiting with code 2 on any data failure."""
    echo("[blue]>[/blue] Loading provider data …")
    try:
        providers = load_providers(source)
        echo(f"  {len(providers)} rows x {len(providers.columns)} columns")
        echo("[blue]>[/blue] Aggregating supply …")
        supply_long, report = summarize_supply(providers, lenient=lenient)
    except PipelineError as exc:
        _fail(exc)
        missing = getattr(exc, "missing", None)
        if missing:
            console.print(f"  Expected: {', '.join(REQUIRED_COLUMNS)}")
        raise typer.Exit(code=2)

    for w in report.warnings:
        echo(f"  [yellow]![/yellow] {w}")
    return supply_long, report


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """texas-vaccine-supply CLI."""


# ── run command ──────────────────────────────────────────────────


@app.command()
def run(
    source: str = typer.Option(
        ..., "--source", "-s",
        help="URL or path of the vaccine-provider CSV.",
    ),
    out_dir: Path = typer.Option(
        Path("."), "--out-dir", "-o",
        help="Directory for clean_supply_data.csv + vaccine_supply_chart.png.",
    ),
    lenient: bool = typer.Option(
        False, "--lenient",
        help="Count missing or non-numeric supply values as 0 instead of failing.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes both artifacts.",
    ),
) -> None:
    """Download, aggregate, chart and export statewide vaccine supply."""
    echo = _printer(quiet)
    if not quiet:
        console.print(Panel(
            f"[bold]texas-vaccine-supply[/bold] v{__version__}\n"
            f"Source: {source}\nOutput: {out_dir}\n"
            f"Mode:   {'lenient' if lenient else 'strict'}",
            title="Pipeline Start", border_style="blue",
        ))

    supply_long, _report = _load_and_summarize(source, lenient=lenient, echo=echo)

    try:
        echo("[blue]>[/blue] Rendering chart …")
        fig = build_supply_chart(supply_long)

        echo("[blue]>[/blue] Writing artifacts …")
        results = export_artifacts(out_dir, supply_long, fig)
    except WriteError as exc:
        _fail(exc)
        for result in exc.results:
            if result.ok:
                console.print(f"  [green]ok[/green]     {result.artifact} -> {result.path}")
            else:
                console.print(
                    f"  [red]failed[/red] {result.artifact}: {escape(result.error)} ({result.path})"
                )
        raise typer.Exit(code=1)
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)

    for result in results:
        echo(f"  {result.artifact.upper():<4}-> {result.path}")

    if not quiet:
        console.print(_supply_table(supply_long))
        console.print(Panel(
            f"[green]Done[/green] — {len(supply_long)} vaccine types -> {out_dir}",
            title="Pipeline Complete", border_style="green",
        ))


# ── validate command ─────────────────────────────────────────────


@app.command()
def validate(
    source: str = typer.Option(
        ..., "--source", "-s",
        help="URL or path of the vaccine-provider CSV.",
    ),
    lenient: bool = typer.Option(
        False, "--lenient",
        help="Count missing or non-numeric supply values as 0 instead of failing.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress the summary table.",
    ),
) -> None:
    """Check a source without writing any artifacts.

    Exit 0 = OK, exit 2 = load or schema failure.
    """
    echo = _printer(quiet)
    if not quiet:
        console.print(Panel(
            f"[bold]texas-vaccine-supply[/bold] v{__version__}  [dim]validate mode[/dim]\n"
            f"Source: {source}",
            title="Validate", border_style="cyan",
        ))

    supply_long, report = _load_and_summarize(source, lenient=lenient, echo=echo)

    if not quiet:
        tbl = _supply_table(supply_long)
        console.print(tbl)
        console.print(
            f"  Rows in: {report.rows_in}  Coerced values: {report.coerced_values}  "
            "Status: [green]PASS[/green]"
        )

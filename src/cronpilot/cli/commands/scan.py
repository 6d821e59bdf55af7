"""Scan command for cronpilot CLI."""

from pathlib import Path

import typer
from rich.table import Table

from cronpilot.cli import app, console
from cronpilot.cli.utils import load_config
from cronpilot.errors import InvalidCronExpressionError, SourceParseError
from cronpilot.scheduler import resolve_cron_expr, scan_dirs


@app.command()
def scan(
    dirs: list[Path] | None = typer.Argument(
        None,
        help="Directories to scan (defaults to configured dirs, then the current directory)",
    ),
    exclude: list[str] = typer.Option(
        [],
        "--exclude",
        "-e",
        help="Glob pattern of directory names to skip (can be used multiple times)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file used to resolve keys",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON",
    ),
) -> None:
    """List @Cron annotations found in Python source files.

    Examples:
        cronpilot scan
        cronpilot scan ./jobs ./tasks --exclude .venv
        cronpilot scan --json
    """
    store, settings = load_config(config)
    roots = dirs or [Path(d) for d in settings.dirs] or [Path.cwd()]

    try:
        entries = scan_dirs(roots, [*settings.exclude, *exclude])
    except SourceParseError as e:
        console.print(f"[red]✗[/] {e}")
        raise typer.Exit(1)

    rows = []
    for entry in entries:
        try:
            resolved: str | None = resolve_cron_expr(entry.cron_expr, store)
        except InvalidCronExpressionError:
            resolved = None
        rows.append(
            {
                "file": entry.source,
                "line": entry.lineno,
                "handler": entry.handler,
                "cron_expr": entry.cron_expr,
                "resolved": resolved,
                "valid": resolved is not None,
            }
        )

    if json_output:
        console.print_json(data=rows)
        return

    if not rows:
        console.print("[yellow]No @Cron annotations found.[/]")
        return

    table = Table(title="Cron Annotations")
    table.add_column("Handler", style="cyan")
    table.add_column("Expression")
    table.add_column("Schedule")
    table.add_column("Location", style="dim")

    for row in rows:
        if not row["valid"]:
            schedule = "[red]✗ invalid[/]"
        elif row["resolved"] != row["cron_expr"]:
            schedule = f"[green]{row['resolved']}[/]"
        else:
            schedule = "[green]✓[/]"

        table.add_row(
            row["handler"],
            row["cron_expr"],
            schedule,
            f"{row['file']}:{row['line']}",
        )

    console.print(table)

"""Check command for cronpilot CLI."""

from pathlib import Path

import typer

from cronpilot.cli import app, console
from cronpilot.cli.utils import load_config
from cronpilot.errors import InvalidCronExpressionError
from cronpilot.scheduler import is_valid_cron_expr, resolve_cron_expr


@app.command()
def check(
    expression: str = typer.Argument(..., help="Cron expression or config key"),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file used to resolve keys",
    ),
) -> None:
    """Check a six-field cron expression.

    Anything that is not a valid expression is looked up as a key in the
    config file, and the value found there is checked instead.

    Examples:
        cronpilot check "*/30 * * * * *"
        cronpilot check cron.nightly --config config.yaml
    """
    store, _settings = load_config(config)

    try:
        resolved = resolve_cron_expr(expression, store)
    except InvalidCronExpressionError as e:
        console.print(f"[red]✗[/] {e}")
        raise typer.Exit(1)

    if is_valid_cron_expr(expression):
        console.print(f"[green]✓[/] [cyan]{expression}[/] is valid")
    else:
        console.print(f"[green]✓[/] [cyan]{expression}[/] resolves to [cyan]{resolved}[/]")

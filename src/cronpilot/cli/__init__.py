"""cronpilot CLI interface."""

from pathlib import Path

import typer
from rich.console import Console

# CLI App
app = typer.Typer(
    name="cronpilot",
    help="Cron scheduling for annotated Python handler methods.",
    no_args_is_help=True,
)

# Console for rich output
console = Console()

# Default paths
CRONPILOT_DIR = Path.home() / ".cronpilot"
CONFIG_FILE = CRONPILOT_DIR / "config.yaml"

# Import commands to register them
from cronpilot.cli.commands import check, run, scan  # noqa: E402, F401


@app.command()
def version() -> None:
    """Show cronpilot version."""
    from cronpilot import __version__

    console.print(f"cronpilot v{__version__}")


if __name__ == "__main__":
    app()

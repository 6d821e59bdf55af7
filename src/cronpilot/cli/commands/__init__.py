"""CLI commands for cronpilot."""

# Import command modules to register them with the app
# These imports have side effects (register commands via @app.command())
from cronpilot.cli.commands import check, run, scan

__all__ = ["check", "run", "scan"]

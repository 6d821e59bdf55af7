"""Run command for cronpilot CLI."""

from __future__ import annotations

import logging
import signal
import threading
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from cronpilot.cli import app, console
from cronpilot.cli.utils import import_handler, load_config, setup_logging
from cronpilot.errors import ManifestError, SourceParseError
from cronpilot.scheduler import CronScheduler

if TYPE_CHECKING:
    from types import FrameType

logger = logging.getLogger(__name__)


def wait_for_shutdown() -> None:
    """Block until SIGINT or SIGTERM is received."""
    stop_event = threading.Event()

    def handle_signal(signum: int, frame: FrameType | None) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)
    stop_event.wait()


@app.command()
def run(
    handlers: list[str] = typer.Option(
        [],
        "--handler",
        "-H",
        help="Handler as module:Class or module:object (can be used multiple times)",
    ),
    dirs: list[Path] = typer.Option(
        [],
        "--dir",
        "-d",
        help="Directory to scan for @Cron annotations (can be used multiple times)",
    ),
    manifest: Path | None = typer.Option(
        None,
        "--manifest",
        "-m",
        help="YAML manifest listing schedules and handler methods",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file for settings and schedule keys",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Run the scheduler in the foreground.

    Loads the handlers, registers every annotated or manifest-listed method,
    and fires jobs until interrupted.

    Examples:
        cronpilot run --handler jobs:Reports --dir ./jobs
        cronpilot run -H jobs:Reports -m jobs.yaml -c config.yaml
    """
    setup_logging(debug)
    store, settings = load_config(config)

    scheduler = CronScheduler(config=store, settings=settings)
    scheduler.set_dirs(*dirs)
    scheduler.register_handlers(*(import_handler(spec) for spec in handlers))

    try:
        registered = scheduler.parse_source_for_cron_jobs()
        if manifest is not None:
            registered += scheduler.load_manifest(manifest)
    except (SourceParseError, ManifestError, FileNotFoundError) as e:
        console.print(f"[red]✗[/] {e}")
        scheduler.shutdown(wait=False)
        raise typer.Exit(1)

    if registered == 0:
        console.print("[yellow]![/] No cron jobs registered")
    else:
        console.print(f"[green]✓[/] Registered {registered} cron job(s)")

    scheduler.start()
    console.print("[cyan]▶[/] Scheduler running, press Ctrl+C to stop")

    try:
        wait_for_shutdown()
    finally:
        scheduler.shutdown()
        console.print("Scheduler stopped")

"""Utility functions for cronpilot CLI."""

from __future__ import annotations

import importlib
import inspect
import logging
import sys
from pathlib import Path
from typing import Any

import typer

from cronpilot.cli import CONFIG_FILE, console
from cronpilot.config import Settings, YamlConfigStore, load_settings
from cronpilot.errors import ConfigError


def setup_logging(debug: bool = False) -> None:
    """Send log records to stderr.

    Args:
        debug: Enable debug logging.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_config(path: Path | None) -> tuple[YamlConfigStore, Settings]:
    """Load the config store and scheduler settings.

    Args:
        path: Config file, or None for ~/.cronpilot/config.yaml.

    Raises:
        typer.Exit: If the config file is missing or invalid.
    """
    if path is not None and not path.exists():
        console.print(f"[red]Error:[/] Config file not found: {path}")
        raise typer.Exit(1)

    config_path = path or CONFIG_FILE
    try:
        return YamlConfigStore.from_file(config_path), load_settings(config_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)


def import_handler(spec: str) -> Any:
    """Import a handler given as ``module:attribute``.

    Classes are instantiated with no arguments; any other object is used as is.
    The current directory is importable so that local modules can be named.

    Raises:
        typer.Exit: If the handler cannot be imported or instantiated.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        console.print(f"[red]Error:[/] Invalid handler: {spec}")
        console.print("Use [cyan]--handler module:Class[/]")
        raise typer.Exit(1)

    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module = importlib.import_module(module_name)
        obj = module
        for part in attr.split("."):
            obj = getattr(obj, part)
        return obj() if inspect.isclass(obj) else obj
    except Exception as e:
        console.print(f"[red]Error:[/] Cannot load handler {spec}: {e}")
        raise typer.Exit(1)

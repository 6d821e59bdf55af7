"""Error types for cronpilot scheduling."""

from __future__ import annotations

from typing import Any


class CronError(Exception):
    """Base error for cronpilot."""


class InvalidCronExpressionError(CronError):
    """Raised when a schedule expression is malformed and cannot be resolved.

    The message always names the expression as originally supplied, not the
    value looked up for it in configuration.
    """

    def __init__(self, expression: str) -> None:
        super().__init__(f"Invalid cron expression: {expression}")
        self.expression = expression


class JobRegistrationError(CronError):
    """The trigger engine refused to register a job."""


class SchedulerNotInitializedError(CronError):
    """Raised when starting a scheduler whose engine was never created or was shut down."""

    def __init__(self) -> None:
        super().__init__("Cron scheduler is not initialized")


class SourceParseError(CronError):
    """A scanned source file could not be parsed."""

    def __init__(self, path: str, message: str, lineno: int | None = None) -> None:
        location = f"{path}:{lineno}" if lineno is not None else path
        super().__init__(f"Failed to parse {location}: {message}")
        self.path = path
        self.lineno = lineno


class ManifestError(CronError):
    """Error loading a job manifest."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ConfigError(CronError):
    """Error loading or accessing configuration."""

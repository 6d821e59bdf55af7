"""APScheduler service for cronpilot job scheduling."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import STATE_PAUSED, STATE_RUNNING, STATE_STOPPED

from cronpilot.config import Settings
from cronpilot.errors import CronError, JobRegistrationError, SchedulerNotInitializedError

from .dispatch import resolve_handler_methods, safe_job
from .manifest import ManifestParser
from .scanner import iter_annotated_files
from .triggers import build_cron_trigger, resolve_cron_expr

if TYPE_CHECKING:
    from collections.abc import Callable

    from apscheduler.schedulers.base import BaseScheduler

    from cronpilot.config import ConfigStore

    from .scanner import AnnotationEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class Job(Protocol):
    """An object that carries its own schedule."""

    def cron_expr(self) -> str: ...

    def run(self) -> None: ...


class CronScheduler:
    """Cron job scheduler backed by APScheduler.

    Jobs are registered directly with :meth:`add_job`, from :class:`Job`
    objects, from a YAML manifest, or discovered from ``@Cron`` annotations
    on methods of registered handler objects.

    Stopping pauses dispatch and keeps every registered job, so the scheduler
    can be started again. :meth:`shutdown` releases the engine for good.
    """

    def __init__(
        self,
        config: ConfigStore | None = None,
        settings: Settings | None = None,
        scheduler: BaseScheduler | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            config: Store used to resolve schedule expressions given as keys.
            settings: Scheduler settings (defaults apply when omitted).
            scheduler: APScheduler instance to drive (a BackgroundScheduler
                is created when omitted).
        """
        self._settings = settings or Settings()
        self._config = config

        if scheduler is None:
            scheduler = BackgroundScheduler(job_defaults=self._settings.job_defaults())
        self._scheduler: BaseScheduler | None = scheduler

        self._dirs: list[Path] = [Path(d) for d in self._settings.dirs]
        self._handlers: list[Any] = []
        self._expressions: dict[str, str] = {}

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is dispatching jobs."""
        return self._scheduler is not None and self._scheduler.state == STATE_RUNNING

    @property
    def dirs(self) -> list[Path]:
        """Directories scanned for annotations."""
        return list(self._dirs)

    @property
    def handlers(self) -> list[Any]:
        """Registered handler objects, in registration order."""
        return list(self._handlers)

    def set_dirs(self, *dirs: Path | str) -> None:
        """Add directories to scan for ``@Cron`` annotations."""
        self._dirs.extend(Path(d) for d in dirs)

    def register_handlers(self, *handlers: Any) -> None:
        """Register objects whose methods may be named by annotations."""
        self._handlers.extend(handlers)

    def add_job(
        self,
        cron_expr: str,
        func: Callable[[], Any],
        name: str | None = None,
    ) -> str:
        """Schedule a callable on a cron expression.

        The expression may be a configuration key that resolves to a cron
        expression. The callable is wrapped so that exceptions it raises are
        logged rather than propagated.

        Args:
            cron_expr: Six-field cron expression or configuration key.
            func: Zero-argument callable to run.
            name: Job name for logs (defaults to the callable's name).

        Returns:
            The job ID.

        Raises:
            InvalidCronExpressionError: If the expression is malformed.
            SchedulerNotInitializedError: If the scheduler was shut down.
            JobRegistrationError: If APScheduler refuses the job.
        """
        expr = resolve_cron_expr(cron_expr, self._config)

        if self._scheduler is None:
            raise SchedulerNotInitializedError()

        job_name = name or getattr(func, "__qualname__", repr(func))
        trigger = build_cron_trigger(expr, self._settings.timezone)

        try:
            job = self._scheduler.add_job(safe_job(func, job_name), trigger=trigger, name=job_name)
        except Exception as e:
            msg = f"Failed to add cron job {job_name}: {e}"
            raise JobRegistrationError(msg) from e

        self._expressions[job.id] = expr
        logger.info(f"Registered cron job {job_name} with expression [{expr}]")
        return job.id

    def register_jobs(self, *jobs: Job) -> int:
        """Schedule objects that provide their own cron expression.

        Failures are logged and the remaining jobs are still registered.

        Returns:
            Number of jobs registered.
        """
        registered = 0
        for job in jobs:
            name = f"{type(job).__qualname__}.run"
            try:
                self.add_job(job.cron_expr(), job.run, name=name)
            except CronError as e:
                logger.error(f"Failed to add cron job {name}: {e}")
                continue
            registered += 1
        return registered

    def _register_entry(self, entry: AnnotationEntry) -> int:
        registered = 0
        for handler, method in resolve_handler_methods(entry, self._handlers):
            name = f"{type(handler).__qualname__}.{entry.handler}"
            try:
                self.add_job(entry.cron_expr, method, name=name)
            except CronError as e:
                logger.error(f"Failed to add cron job {name}: {e}")
                continue
            registered += 1
        return registered

    def parse_source_for_cron_jobs(self, default_dir: Path | str | None = None) -> int:
        """Discover and schedule annotated handler methods.

        Walks every configured directory (or ``default_dir``, then the
        current working directory, when none is configured) and registers a
        job for each ``@Cron`` annotation matching a zero-argument method on
        a registered handler.

        Args:
            default_dir: Directory to scan when no directories are set.

        Returns:
            Number of jobs registered.

        Raises:
            SourceParseError: If a scanned file is not valid Python.
        """
        if not self._handlers:
            logger.debug("No handlers registered, skipping source scan")
            return 0

        roots = self._dirs or [Path(default_dir) if default_dir else Path.cwd()]

        registered = 0
        for root in roots:
            for path, entries in iter_annotated_files(root, self._settings.exclude):
                if entries:
                    logger.debug(f"Found {len(entries)} cron annotation(s) in {path}")
                for entry in entries:
                    registered += self._register_entry(entry)

        return registered

    def load_manifest(self, path: Path | str) -> int:
        """Schedule the handler methods listed in a YAML manifest.

        Returns:
            Number of jobs registered.

        Raises:
            ManifestError: If the manifest is invalid.
            FileNotFoundError: If the manifest does not exist.
        """
        parser = ManifestParser()
        manifest = parser.parse_file(path)

        registered = 0
        for entry in parser.to_entries(manifest, source=str(path)):
            registered += self._register_entry(entry)
        return registered

    def start(self) -> None:
        """Start, or resume, dispatching jobs. Returns immediately.

        Raises:
            SchedulerNotInitializedError: If the scheduler was shut down.
        """
        if self._scheduler is None:
            raise SchedulerNotInitializedError()

        if self._scheduler.state == STATE_STOPPED:
            self._scheduler.start()
        elif self._scheduler.state == STATE_PAUSED:
            self._scheduler.resume()
        else:
            return

        logger.info("Scheduler started")

    def stop(self) -> None:
        """Stop dispatching jobs. Runs already in progress are not interrupted."""
        if self._scheduler is None or self._scheduler.state != STATE_RUNNING:
            return

        self._scheduler.pause()
        logger.info("Scheduler stopped")

    def shutdown(self, wait: bool = True) -> None:
        """Shut the engine down and drop every job.

        Args:
            wait: Whether to wait for running jobs to complete.
        """
        if self._scheduler is None:
            return

        if self._scheduler.state != STATE_STOPPED:
            self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        self._expressions.clear()
        logger.info("Scheduler shut down")

    def get_jobs(self) -> list[dict[str, Any]]:
        """Get all scheduled jobs.

        Returns:
            List of job information dictionaries.
        """
        if self._scheduler is None:
            return []

        return [
            {
                "id": job.id,
                "name": job.name,
                "cron_expr": self._expressions.get(job.id),
                "trigger": str(job.trigger),
                # Jobs added before start() have no next run time yet
                "next_run": getattr(job, "next_run_time", None),
            }
            for job in self._scheduler.get_jobs()
        ]

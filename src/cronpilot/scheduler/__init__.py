"""cronpilot scheduling system.

This module provides APScheduler-based cron scheduling of handler methods
discovered from ``@Cron`` source annotations, YAML manifests, or registered
directly, with configuration-backed schedule expressions.
"""

from .dispatch import resolve_handler_methods, safe_job
from .manifest import ManifestParser
from .scanner import (
    CRON_MARKER,
    AnnotationEntry,
    iter_annotated_files,
    parse_cron_from_file,
    parse_cron_source,
    scan_dirs,
)
from .service import CronScheduler, Job
from .triggers import build_cron_trigger, is_valid_cron_expr, resolve_cron_expr

__all__ = [
    "CRON_MARKER",
    "AnnotationEntry",
    "CronScheduler",
    "Job",
    "ManifestParser",
    "build_cron_trigger",
    "is_valid_cron_expr",
    "iter_annotated_files",
    "parse_cron_from_file",
    "parse_cron_source",
    "resolve_cron_expr",
    "resolve_handler_methods",
    "safe_job",
    "scan_dirs",
]

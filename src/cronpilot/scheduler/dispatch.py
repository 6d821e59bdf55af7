"""Resolve annotated method names on handler objects and wrap them as jobs."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .scanner import AnnotationEntry

logger = logging.getLogger(__name__)


def _handler_name(handler: Any) -> str:
    return type(handler).__qualname__


def _lookup_method(handler: Any, name: str) -> Callable[..., Any] | None:
    # Static lookup runs no property or __getattr__ code on the handler
    attr = inspect.getattr_static(handler, name, None)
    if not (inspect.isfunction(attr) or isinstance(attr, staticmethod | classmethod)):
        return None
    return getattr(handler, name)


def _takes_no_parameters(method: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return False
    return not signature.parameters


def resolve_handler_methods(
    entry: AnnotationEntry,
    handlers: Sequence[Any],
) -> list[tuple[Any, Callable[[], Any]]]:
    """Find the method named by an annotation on every registered handler.

    Matching is by exact, case-sensitive name. A handler without the method
    is skipped quietly; the name may belong to another handler. Only functions
    defined on the handler (plain, static or class methods) qualify, so
    properties, nested classes and other callable attributes are skipped. A
    method that takes any parameter is rejected with a warning.

    Args:
        entry: Annotation naming the method.
        handlers: Registered handler instances, in registration order.

    Returns:
        List of (handler, bound method) pairs, one per matching handler.
    """
    matches: list[tuple[Any, Callable[[], Any]]] = []

    for handler in handlers:
        method = _lookup_method(handler, entry.handler)
        if method is None:
            logger.debug(f"Method {entry.handler} not found in handler {_handler_name(handler)}")
            continue

        if not _takes_no_parameters(method):
            logger.warning(
                f"Invalid method signature {_handler_name(handler)}.{entry.handler}: "
                "must take no parameters"
            )
            continue

        matches.append((handler, method))

    return matches


def safe_job(func: Callable[[], Any], name: str | None = None) -> Callable[[], None]:
    """Wrap a zero-argument callable so that failures never escape it.

    Any exception raised by ``func`` is logged with its traceback and
    swallowed, so one failing job cannot disturb the scheduler or other jobs.
    Coroutine functions are run to completion in a fresh event loop.

    Args:
        func: Callable to run on each firing.
        name: Name used in log messages (defaults to the callable's name).

    Returns:
        Callable safe to hand to the trigger engine.
    """
    job_name = name or getattr(func, "__qualname__", repr(func))
    is_coroutine = inspect.iscoroutinefunction(func)

    def run_job() -> None:
        try:
            if is_coroutine:
                asyncio.run(func())
            else:
                func()
        except Exception as e:
            logger.exception(f"Panic in cron job {job_name}: {e}")

    run_job.__qualname__ = run_job.__name__ = f"safe_job[{job_name}]"
    return run_job

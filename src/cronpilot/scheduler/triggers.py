"""Cron expression validation and APScheduler trigger construction."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from apscheduler.triggers.cron import CronTrigger as APCronTrigger

from cronpilot.errors import InvalidCronExpressionError

if TYPE_CHECKING:
    from cronpilot.config import ConfigStore

logger = logging.getLogger(__name__)

# second minute hour day month day_of_week
CRON_FIELDS = ("second", "minute", "hour", "day", "month", "day_of_week")

# Cron numbering: 0 is Sunday. APScheduler counts from Monday.
DAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _parse_day(text: str) -> int:
    if text.lower() in DAY_NAMES:
        return DAY_NAMES.index(text.lower())
    if not text.isdigit() or int(text) >= len(DAY_NAMES):
        msg = f"Invalid day of week: {text!r}"
        raise ValueError(msg)
    return int(text)


def _day_of_week_field(value: str) -> str:
    """Translate a cron day-of-week field into APScheduler's numbering.

    Accepts ``*``, ``?``, single days, ``a-b`` ranges, ``/step`` suffixes and
    comma lists, with days given as 0-6 (0 = Sunday) or ``sun``..``sat``.
    """
    if value in ("*", "?"):
        return "*"

    days: set[int] = set()
    for part in value.split(","):
        span, slash, step_text = part.partition("/")
        step = 1
        if slash:
            if not step_text.isdigit() or int(step_text) == 0:
                msg = f"Invalid step in day of week: {part!r}"
                raise ValueError(msg)
            step = int(step_text)

        if span in ("*", "?"):
            low, high = 0, len(DAY_NAMES) - 1
        elif "-" in span:
            first, _, last = span.partition("-")
            low, high = _parse_day(first), _parse_day(last)
            if low > high:
                msg = f"Invalid day of week range: {part!r}"
                raise ValueError(msg)
        else:
            low = _parse_day(span)
            # "a/n" runs from a to the end of the week
            high = len(DAY_NAMES) - 1 if slash else low

        days.update(range(low, high + 1, step))

    return ",".join(str(day) for day in sorted((d - 1) % 7 for d in days))


def _make_trigger(expr: str, timezone: str | None = None) -> APCronTrigger:
    parts = expr.split()
    if len(parts) != len(CRON_FIELDS):
        msg = f"Invalid cron expression: {expr}. Expected {len(CRON_FIELDS)} fields."
        raise ValueError(msg)

    second, minute, hour, day, month, day_of_week = parts
    fields = {
        "second": second,
        "minute": minute,
        "hour": hour,
        "day": "*" if day == "?" else day,
        "month": month,
        "day_of_week": _day_of_week_field(day_of_week),
    }

    # "local" means let APScheduler pick the host timezone
    tz = timezone if timezone and timezone != "local" else None
    return APCronTrigger(**fields, timezone=tz)


def is_valid_cron_expr(expr: str) -> bool:
    """Check whether ``expr`` is a six-field, seconds-resolution cron expression.

    Args:
        expr: Expression like ``"*/30 * * * * *"``.

    Returns:
        True if every field parses, False otherwise.
    """
    if not isinstance(expr, str):
        return False
    try:
        _make_trigger(expr)
    except ValueError:
        return False
    return True


def resolve_cron_expr(expr: str, config: ConfigStore | None) -> str:
    """Resolve a schedule expression, falling back to a configuration lookup.

    If ``expr`` is not itself valid it is treated as a configuration key and
    the looked-up value is validated instead.

    Args:
        expr: Cron expression or configuration key.
        config: Store used to resolve keys.

    Returns:
        A valid cron expression.

    Raises:
        InvalidCronExpressionError: If neither ``expr`` nor its looked-up
            value is valid. The error names ``expr``.
    """
    if is_valid_cron_expr(expr):
        return expr

    if config is not None:
        resolved = config.get_string(expr).strip()
        if is_valid_cron_expr(resolved):
            logger.debug(f"Resolved cron key '{expr}' to [{resolved}]")
            return resolved

    raise InvalidCronExpressionError(expr)


def build_cron_trigger(expr: str, timezone: str | None = None) -> APCronTrigger:
    """Build an APScheduler trigger from a validated cron expression.

    Args:
        expr: Six-field cron expression.
        timezone: Timezone name, or "local"/None for the host timezone.

    Returns:
        APScheduler CronTrigger instance.

    Raises:
        InvalidCronExpressionError: If the expression is malformed.
    """
    try:
        return _make_trigger(expr, timezone)
    except ValueError as e:
        raise InvalidCronExpressionError(expr) from e

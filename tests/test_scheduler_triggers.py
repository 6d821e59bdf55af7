"""Tests for cron expression validation and resolution."""

from datetime import datetime, timezone

import pytest
from apscheduler.triggers.cron import CronTrigger as APCronTrigger

from cronpilot.config import YamlConfigStore
from cronpilot.errors import InvalidCronExpressionError
from cronpilot.scheduler.triggers import (
    build_cron_trigger,
    is_valid_cron_expr,
    resolve_cron_expr,
)


class TestIsValidCronExpr:
    """Tests for is_valid_cron_expr function."""

    @pytest.mark.parametrize(
        "expr",
        [
            "*/30 * * * * *",
            "0 0 * * * *",
            "0 30 9 * * mon-fri",
            "0 0 0 1 jan *",
            "15,45 * * * * *",
            "0 */5 8-18 * * *",
            "0 0 12 ? * *",
            "0 0 12 * * ?",
            "0 0 9 * * 0,6",
            "0 0 9 * * */2",
        ],
    )
    def test_valid_expressions(self, expr: str) -> None:
        """Test that well-formed six-field expressions are accepted."""
        assert is_valid_cron_expr(expr) is True

    @pytest.mark.parametrize(
        "expr",
        [
            "* * * * *",
            "* * * * * * *",
            "60 * * * * *",
            "* 60 * * * *",
            "* * 24 * * *",
            "* * * 32 * *",
            "* * * * 13 *",
            "*/0 * * * * *",
            "",
            "cron.every30sec",
            "* * * * * 7",
            "* * * * * 5-1",
            "* * * * * 1/0",
            "* * * * * funday",
        ],
    )
    def test_invalid_expressions(self, expr: str) -> None:
        """Test that wrong field counts and out-of-range fields are rejected."""
        assert is_valid_cron_expr(expr) is False

    def test_surrounding_whitespace(self) -> None:
        """Test that extra whitespace between fields is tolerated."""
        assert is_valid_cron_expr("  0  0 * * * * ") is True


class TestResolveCronExpr:
    """Tests for resolve_cron_expr function."""

    def test_valid_expression_returned_as_is(self, config_store: YamlConfigStore) -> None:
        """Test that a valid expression is not looked up."""
        assert resolve_cron_expr("0 0 * * * *", config_store) == "0 0 * * * *"

    def test_key_resolves_to_expression(self, config_store: YamlConfigStore) -> None:
        """Test that a config key resolves to its stored expression."""
        assert resolve_cron_expr("cron.every30sec", config_store) == "*/30 * * * * *"

    def test_missing_key_named_in_error(self, config_store: YamlConfigStore) -> None:
        """Test that an unknown key fails with the key in the message."""
        with pytest.raises(InvalidCronExpressionError, match="cron.missing") as exc_info:
            resolve_cron_expr("cron.missing", config_store)

        assert exc_info.value.expression == "cron.missing"

    def test_invalid_resolved_value_reports_key(self, config_store: YamlConfigStore) -> None:
        """Test that a key holding an invalid value is reported by key, not value."""
        with pytest.raises(InvalidCronExpressionError) as exc_info:
            resolve_cron_expr("cron.broken", config_store)

        assert exc_info.value.expression == "cron.broken"
        assert "not a cron expression" not in str(exc_info.value)

    def test_without_config_store(self) -> None:
        """Test that keys cannot be resolved without a store."""
        with pytest.raises(InvalidCronExpressionError):
            resolve_cron_expr("cron.every30sec", None)


class TestBuildCronTrigger:
    """Tests for build_cron_trigger function."""

    def test_build_trigger(self) -> None:
        """Test that fields map to second..day_of_week."""
        trigger = build_cron_trigger("5 10 3 * * *")

        assert isinstance(trigger, APCronTrigger)
        fields = {field.name: str(field) for field in trigger.fields}
        assert fields["second"] == "5"
        assert fields["minute"] == "10"
        assert fields["hour"] == "3"

    def test_build_trigger_with_timezone(self) -> None:
        """Test building a trigger for a named timezone."""
        trigger = build_cron_trigger("0 0 9 * * *", timezone="America/New_York")

        assert str(trigger.timezone) == "America/New_York"

    def test_build_trigger_invalid(self) -> None:
        """Test that invalid expressions raise InvalidCronExpressionError."""
        with pytest.raises(InvalidCronExpressionError, match="Invalid cron expression"):
            build_cron_trigger("0 0 * * *")


class TestDayOfWeek:
    """Tests for day-of-week numbering, where 0 is Sunday."""

    # Sunday 2026-10-18 12:00 UTC
    SUNDAY_NOON = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
    # Saturday 2026-10-17 12:00 UTC
    SATURDAY_NOON = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

    def _next_fire(self, expr: str, now: datetime) -> datetime:
        return build_cron_trigger(expr, timezone="UTC").get_next_fire_time(None, now)

    def test_one_is_monday(self) -> None:
        """Test that day 1 fires on Monday."""
        next_fire = self._next_fire("* * * * * 1", self.SUNDAY_NOON)

        assert next_fire.strftime("%A") == "Monday"
        assert (next_fire.year, next_fire.month, next_fire.day) == (2026, 10, 19)
        assert (next_fire.hour, next_fire.minute) == (0, 0)

    def test_zero_is_sunday(self) -> None:
        """Test that day 0 fires on Sunday."""
        next_fire = self._next_fire("0 0 9 * * 0", self.SATURDAY_NOON)

        assert next_fire.strftime("%A") == "Sunday"
        assert next_fire.day == 18

    def test_weekday_range(self) -> None:
        """Test that 1-5 runs Monday to Friday."""
        next_fire = self._next_fire("0 0 9 * * 1-5", self.SATURDAY_NOON)

        assert next_fire.strftime("%A") == "Monday"
        assert next_fire.day == 19

    def test_names_match_numbers(self) -> None:
        """Test that day names and numbers select the same days."""
        by_name = self._next_fire("0 0 9 * * mon-fri", self.SATURDAY_NOON)
        by_number = self._next_fire("0 0 9 * * 1-5", self.SATURDAY_NOON)

        assert by_name == by_number

    def test_question_mark_day_of_month(self) -> None:
        """Test that ? in the day-of-month field means any day."""
        next_fire = self._next_fire("0 0 9 ? * *", self.SUNDAY_NOON)

        assert (next_fire.day, next_fire.hour) == (19, 9)

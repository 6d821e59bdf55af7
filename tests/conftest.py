"""Pytest configuration and shared fixtures."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from cronpilot.config import YamlConfigStore
from cronpilot.scheduler import CronScheduler


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_store() -> YamlConfigStore:
    """Config store with schedules stored under keys."""
    return YamlConfigStore(
        {
            "cron": {
                "every30sec": "*/30 * * * * *",
                "hourly": "0 0 * * * *",
                "broken": "not a cron expression",
            }
        },
        env_prefix="CRONPILOT_TEST",
    )


@pytest.fixture
def scheduler(config_store: YamlConfigStore) -> Generator[CronScheduler, None, None]:
    """Create a scheduler and shut it down after the test."""
    cron_scheduler = CronScheduler(config=config_store)
    yield cron_scheduler
    cron_scheduler.shutdown(wait=False)


@pytest.fixture
def handler_tree(temp_dir: Path) -> Path:
    """Create a source tree with annotated handler methods."""
    (temp_dir / "handlers.py").write_text(
        '''
class H:
    # Ping every hour
    # @Cron 0 0 * * * *
    def Ping(self):
        pass
'''
    )
    nested = temp_dir / "jobs" / "reports"
    nested.mkdir(parents=True)
    (nested / "report.py").write_text(
        '''
class Reports:
    def Report(self, target):
        """Send a report.

        @Cron cron.every30sec
        """
'''
    )
    (temp_dir / "notes.txt").write_text("# @Cron 0 0 * * * *\ndef Ignored(): pass\n")
    return temp_dir

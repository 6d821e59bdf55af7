"""Tests for the job manifest parser."""

from pathlib import Path

import pytest

from cronpilot.errors import ManifestError
from cronpilot.models import Manifest, ManifestEntry
from cronpilot.scheduler.manifest import ManifestParser
from cronpilot.scheduler.scanner import AnnotationEntry


@pytest.fixture
def parser() -> ManifestParser:
    """Create a manifest parser."""
    return ManifestParser()


class TestManifestParser:
    """Tests for ManifestParser."""

    def test_parse_string(self, parser: ManifestParser) -> None:
        """Test parsing a manifest from YAML text."""
        manifest = parser.parse_string(
            """
jobs:
  - schedule: "0 */5 * * * *"
    handler: refresh_cache
  - schedule: cron.nightly
    handler: nightly_report
"""
        )

        assert manifest.jobs == [
            ManifestEntry(schedule="0 */5 * * * *", handler="refresh_cache"),
            ManifestEntry(schedule="cron.nightly", handler="nightly_report"),
        ]

    def test_parse_empty(self, parser: ManifestParser) -> None:
        """Test that an empty document has no jobs."""
        assert parser.parse_string("") == Manifest()

    def test_parse_file(self, parser: ManifestParser, temp_dir: Path) -> None:
        """Test parsing a manifest file."""
        path = temp_dir / "jobs.yaml"
        path.write_text("jobs:\n  - schedule: '0 0 * * * *'\n    handler: Ping\n")

        manifest = parser.parse_file(path)

        assert len(manifest.jobs) == 1

    def test_parse_missing_file(self, parser: ManifestParser, temp_dir: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            parser.parse_file(temp_dir / "missing.yaml")

    def test_invalid_yaml(self, parser: ManifestParser) -> None:
        """Test that malformed YAML raises ManifestError."""
        with pytest.raises(ManifestError, match="Invalid YAML syntax"):
            parser.parse_string("jobs: [unclosed")

    def test_invalid_handler_name(self, parser: ManifestParser) -> None:
        """Test that handler names must be identifiers."""
        with pytest.raises(ManifestError) as exc_info:
            parser.parse_string("jobs:\n  - schedule: '0 0 * * * *'\n    handler: not-a-name\n")

        assert exc_info.value.errors[0]["location"] == "jobs -> 0 -> handler"

    def test_blank_schedule(self, parser: ManifestParser) -> None:
        """Test that blank schedules are rejected."""
        with pytest.raises(ManifestError, match="must not be empty"):
            parser.parse_string("jobs:\n  - schedule: '  '\n    handler: Ping\n")

    def test_to_entries(self, parser: ManifestParser) -> None:
        """Test converting a manifest to annotation entries."""
        manifest = parser.parse_dict(
            {"jobs": [{"schedule": "0 0 * * * *", "handler": "Ping"}]},
        )

        entries = parser.to_entries(manifest, source="jobs.yaml")

        assert entries == [AnnotationEntry("0 0 * * * *", "Ping")]
        assert entries[0].source == "jobs.yaml"
        assert entries[0].lineno == 1

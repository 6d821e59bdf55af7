"""YAML job manifest parser for cronpilot."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cronpilot.errors import ManifestError
from cronpilot.models import Manifest

from .scanner import AnnotationEntry


class ManifestParser:
    """Parser for job manifest files.

    A manifest lists handler methods explicitly instead of annotating them::

        jobs:
          - schedule: "0 */5 * * * *"
            handler: refresh_cache
          - schedule: cron.nightly
            handler: nightly_report
    """

    def parse_file(self, path: Path | str) -> Manifest:
        """Parse a manifest from a YAML file.

        Raises:
            ManifestError: If the file cannot be parsed.
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Manifest file not found: {path}")

        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ManifestError(f"Invalid YAML syntax: {e}") from e

        return self.parse_dict(data or {}, source=str(path))

    def parse_string(self, content: str) -> Manifest:
        """Parse a manifest from a YAML string.

        Raises:
            ManifestError: If the content cannot be parsed.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ManifestError(f"Invalid YAML syntax: {e}") from e

        return self.parse_dict(data or {})

    def parse_dict(self, data: dict[str, Any], source: str = "<dict>") -> Manifest:
        """Validate manifest data.

        Raises:
            ManifestError: If the data is invalid.
        """
        try:
            return Manifest.model_validate(data)
        except ValidationError as e:
            errors = []
            for error in e.errors():
                loc = " -> ".join(str(part) for part in error["loc"])
                errors.append(
                    {
                        "location": loc,
                        "message": error["msg"],
                        "type": error["type"],
                    }
                )

            error_messages = [f"  {err['location']}: {err['message']}" for err in errors]
            msg = f"Manifest validation failed ({source}):\n" + "\n".join(error_messages)
            raise ManifestError(msg, errors=errors) from e

    def to_entries(self, manifest: Manifest, source: str = "") -> list[AnnotationEntry]:
        """Convert manifest jobs to the entries produced by source scanning."""
        return [
            AnnotationEntry(cron_expr=job.schedule, handler=job.handler, source=source, lineno=i)
            for i, job in enumerate(manifest.jobs, start=1)
        ]

"""Declarative job manifest models."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ManifestEntry(BaseModel):
    """A schedule paired with the handler method it triggers."""

    schedule: str = Field(..., description="Cron expression (6 fields) or config key")
    handler: str = Field(..., description="Name of a zero-argument handler method")

    @field_validator("schedule")
    @classmethod
    def validate_schedule(cls, v: str) -> str:
        """Reject blank schedules."""
        v = v.strip()
        if not v:
            msg = "Schedule must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("handler")
    @classmethod
    def validate_handler(cls, v: str) -> str:
        """Ensure handler is a valid method name."""
        if not _IDENTIFIER_RE.match(v):
            msg = f"Invalid handler name: {v}"
            raise ValueError(msg)
        return v


class Manifest(BaseModel):
    """A list of scheduled handler methods."""

    jobs: list[ManifestEntry] = Field(default_factory=list)

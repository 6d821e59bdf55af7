"""cronpilot data models."""

from .manifest import Manifest, ManifestEntry

__all__ = ["Manifest", "ManifestEntry"]

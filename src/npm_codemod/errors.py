"""Error types surfaced on transform results."""

from __future__ import annotations

from pathlib import Path


class TransformError(RuntimeError):
    """Base error for failures that abort a transform run."""


class PackageManagerUndeterminedError(TransformError):
    """Raised when the workspace detector cannot identify a package manager."""

    def __init__(self, root: Path | str) -> None:
        super().__init__(f"Unable to determine package manager for {root}")
        self.root = root


class VersionUndeterminedError(TransformError):
    """Raised when no version is available for the detected package manager."""

    def __init__(self, root: Path | str, package_manager: str | None = None) -> None:
        super().__init__(f"Unable to determine package manager version for {root}")
        self.root = root
        self.package_manager = package_manager


class TransformWriteError(TransformError):
    """Raised (or attached to a result) when one or more files could not be written."""


class ManifestError(ValueError):
    """Raised when an existing manifest is not a JSON object and cannot be rewritten."""

"""Shared result types for codemod transforms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

UNCHANGED = "unchanged"
MODIFIED = "modified"
SKIPPED = "skipped"
ADDED = "added"
DELETED = "deleted"
ERROR = "error"

_VALID_ACTIONS = {UNCHANGED, MODIFIED, SKIPPED, ADDED, DELETED, ERROR}


@dataclass(slots=True, frozen=True)
class TransformerOptions:
    """Run options shared by every transform.

    ``force`` is carried for runners that share this contract; the
    add-package-manager transform does not consult it.
    """

    force: bool = False
    dry: bool = False
    print: bool = False


@dataclass(slots=True, frozen=True)
class TransformerMeta:
    """Descriptive metadata for a transform."""

    name: str
    description: str
    introduced_in: str


@dataclass(frozen=True)
class FileChange:
    """Outcome of applying a transform to a single file."""

    action: str
    additions: int = 0
    deletions: int = 0
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if self.action not in _VALID_ACTIONS:
            raise ValueError(f"Invalid action: {self.action}")
        if self.additions < 0 or self.deletions < 0:
            raise ValueError("Change counts must be non-negative")
        if (self.action == ERROR) != (self.error is not None):
            raise ValueError("error must be set exactly when action is 'error'")
        if self.action == UNCHANGED and (self.additions or self.deletions):
            raise ValueError("An unchanged file cannot report additions or deletions")

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "action": self.action,
            "additions": self.additions,
            "deletions": self.deletions,
        }
        if self.error is not None:
            data["error"] = str(self.error)
        return data


@dataclass
class TransformerResult:
    """Per-file changes plus the error that aborted the run, if any."""

    changes: dict[str, FileChange] = field(default_factory=dict)
    fatal_error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.fatal_error is None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "changes": {path: change.to_dict() for path, change in self.changes.items()},
        }
        if self.fatal_error is not None:
            data["fatalError"] = str(self.fatal_error)
        return data

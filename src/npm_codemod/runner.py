"""Apply pending file modifications and collect a structured result."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from .errors import TransformWriteError
from .file_transform import FileTransform
from .types import (
    ERROR,
    MODIFIED,
    SKIPPED,
    UNCHANGED,
    FileChange,
    TransformerMeta,
    TransformerOptions,
    TransformerResult,
)

logger = logging.getLogger(__name__)

WRITE_ERROR_MESSAGE = "Encountered an error while transforming files"


class Runner:
    """Collect file modifications for one transform run and apply them.

    Nothing raised while writing escapes ``finish``; failures are recorded as
    ``error`` changes and surface as the result's ``fatal_error``.
    """

    def __init__(
        self,
        *,
        transformer: TransformerMeta,
        root_path: Path,
        options: TransformerOptions,
        stream: TextIO | None = None,
    ) -> None:
        self.transformer = transformer
        self.root_path = Path(root_path)
        self.options = options
        self.stream = stream
        self.modifications: dict[str, FileTransform] = {}

    def modify_file(self, *, file_path: Path | str, before: Any, after: Any) -> FileTransform:
        transform = FileTransform(
            root_path=self.root_path,
            file_path=file_path,
            before=before,
            after=after,
        )
        self.modifications[transform.relative_path] = transform
        return transform

    def abort_transform(
        self,
        reason: BaseException | str,
        changes: dict[str, FileChange] | None = None,
    ) -> TransformerResult:
        error = reason if isinstance(reason, BaseException) else TransformWriteError(reason)
        logger.error("%s: %s", self.transformer.name, error)
        return TransformerResult(changes=dict(changes or {}), fatal_error=error)

    def apply(self, transform: FileTransform) -> FileChange:
        """Apply one pending modification according to the run options."""
        additions = transform.additions()
        deletions = transform.deletions()

        if not transform.has_changes():
            return FileChange(action=UNCHANGED)

        if self.options.print:
            self._echo(transform.render_diff())

        if self.options.dry:
            return FileChange(action=SKIPPED, additions=additions, deletions=deletions)

        try:
            transform.write()
        except Exception as exc:
            logger.debug("Failed to write %s", transform.path, exc_info=True)
            return FileChange(action=ERROR, additions=additions, deletions=deletions, error=exc)

        return FileChange(action=MODIFIED, additions=additions, deletions=deletions)

    def finish(self) -> TransformerResult:
        changes: dict[str, FileChange] = {}
        for relative_path, transform in self.modifications.items():
            change = self.apply(transform)
            logger.debug(
                "%s: %s (+%d -%d)",
                relative_path,
                change.action,
                change.additions,
                change.deletions,
            )
            changes[relative_path] = change

        errors = [change.error for change in changes.values() if change.error is not None]
        if errors:
            fatal = TransformWriteError(WRITE_ERROR_MESSAGE)
            fatal.__cause__ = errors[0]
            return self.abort_transform(fatal, changes)

        result = TransformerResult(changes=changes)
        if self.options.print:
            self.log_results(result)
        return result

    def _echo(self, text: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(text)

    @staticmethod
    def log_results(result: TransformerResult) -> None:
        for path, change in result.changes.items():
            logger.info(
                "%s %s (+%d -%d)", change.action, path, change.additions, change.deletions
            )
        if result.fatal_error is not None:
            logger.error("%s", result.fatal_error)

"""Pending modification of a single JSON file.

A ``FileTransform`` holds the parsed content of a file before and after a
transform. Additions and deletions are counted as a line diff of a canonical
rendering with one line per top-level key (keys sorted, each value serialised
compactly). Adding or removing a key is one line; replacing its value,
whatever its shape, is one deletion plus one addition.
"""

from __future__ import annotations

import difflib
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from .errors import ManifestError

DEFAULT_INDENT = "  "


def _canonical_lines(data: Any) -> list[str]:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        text = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)
        return text.splitlines()
    # One line per top-level key, whatever the shape of its value.
    lines = ["{"]
    for key in sorted(data):
        value = json.dumps(data[key], sort_keys=True, ensure_ascii=False)
        lines.append(f"  {json.dumps(key, ensure_ascii=False)}: {value}")
    lines.append("}")
    return lines


def _detect_indent(text: str) -> str:
    for line in text.splitlines()[1:]:
        stripped = line.lstrip(" \t")
        if stripped and stripped != line:
            return line[: len(line) - len(stripped)]
    return DEFAULT_INDENT


def _write_text(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` atomically; on failure the old file is untouched."""
    mode = path.stat().st_mode & 0o777 if path.exists() else None
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_path = Path(handle.name)
            handle.write(text)
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


class FileTransform:
    """Before/after content of one JSON file under ``root_path``."""

    def __init__(
        self,
        *,
        root_path: Path,
        file_path: Path | str,
        before: Any,
        after: Any,
    ) -> None:
        self.root_path = Path(root_path)
        file_path = Path(file_path)
        self.path = file_path if file_path.is_absolute() else self.root_path / file_path
        self.before = before
        self.after = after
        self._counts: tuple[int, int] | None = None

    @property
    def relative_path(self) -> str:
        try:
            return self.path.relative_to(self.root_path).as_posix()
        except ValueError:
            return self.path.as_posix()

    def _diff_counts(self) -> tuple[int, int]:
        if self._counts is None:
            matcher = difflib.SequenceMatcher(
                None,
                _canonical_lines(self.before),
                _canonical_lines(self.after),
                autojunk=False,
            )
            additions = deletions = 0
            for tag, i1, i2, j1, j2 in matcher.get_opcodes():
                if tag in ("delete", "replace"):
                    deletions += i2 - i1
                if tag in ("insert", "replace"):
                    additions += j2 - j1
            self._counts = (additions, deletions)
        return self._counts

    def additions(self) -> int:
        return self._diff_counts()[0]

    def deletions(self) -> int:
        return self._diff_counts()[1]

    def has_changes(self) -> bool:
        additions, deletions = self._diff_counts()
        return bool(additions or deletions)

    def write(self) -> None:
        """Persist ``after`` keeping the file's indentation and final newline.

        A missing file is created. An existing file that does not hold a JSON
        object is left untouched and ``ManifestError`` is raised.
        """
        indent = DEFAULT_INDENT
        trailing_newline = True
        if self.path.exists():
            original = self.path.read_text(encoding="utf-8")
            try:
                current = json.loads(original)
            except json.JSONDecodeError as exc:
                raise ManifestError(f"{self.relative_path} is not valid JSON: {exc}") from exc
            if not isinstance(current, dict):
                raise ManifestError(f"{self.relative_path} must contain a JSON object")
            indent = _detect_indent(original)
            trailing_newline = original.endswith("\n")

        text = json.dumps(self.after, indent=indent, ensure_ascii=False)
        if trailing_newline:
            text += "\n"
        _write_text(self.path, text)

    def render_diff(self) -> str:
        """Return a unified diff of the file's content."""
        before = [] if self.before is None else json.dumps(
            self.before, indent=2, ensure_ascii=False
        ).splitlines()
        after = json.dumps(self.after, indent=2, ensure_ascii=False).splitlines()
        lines = difflib.unified_diff(
            before,
            after,
            fromfile=f"a/{self.relative_path}",
            tofile=f"b/{self.relative_path}",
            lineterm="",
        )
        return "\n".join(lines) + "\n"

"""Tests for JSON file transforms."""

from __future__ import annotations

import pytest

from npm_codemod import file_transform
from npm_codemod.errors import ManifestError
from npm_codemod.file_transform import FileTransform


def _transform(tmp_path, before, after):
    return FileTransform(root_path=tmp_path, file_path="package.json", before=before, after=after)


def test_adding_a_key_counts_one_addition(tmp_path):
    t = _transform(tmp_path, {"name": "a", "version": "1"}, {"name": "a", "version": "1", "packageManager": "npm@7.0.0"})
    assert (t.additions(), t.deletions()) == (1, 0)
    assert t.has_changes()


def test_replacing_a_value_counts_one_of_each(tmp_path):
    t = _transform(tmp_path, {"packageManager": "turbo@1.7.0"}, {"packageManager": "pnpm@1.2.3"})
    assert (t.additions(), t.deletions()) == (1, 1)


def test_removing_a_key_counts_one_deletion(tmp_path):
    t = _transform(tmp_path, {"name": "a", "packageManager": "npm@7.0.0"}, {"name": "a"})
    assert (t.additions(), t.deletions()) == (0, 1)


def test_identical_content_has_no_changes(tmp_path):
    data = {"name": "a", "packageManager": "npm@7.0.0"}
    t = _transform(tmp_path, data, dict(data))
    assert (t.additions(), t.deletions()) == (0, 0)
    assert not t.has_changes()


def test_key_order_does_not_affect_counts(tmp_path):
    t = _transform(tmp_path, {"b": 1, "a": 2}, {"a": 2, "b": 1})
    assert not t.has_changes()


def test_missing_file_counts_from_empty_object(tmp_path):
    t = _transform(tmp_path, None, {"packageManager": "npm@7.0.0"})
    assert (t.additions(), t.deletions()) == (1, 0)


def test_relative_path(tmp_path):
    t = FileTransform(root_path=tmp_path, file_path=tmp_path / "apps" / "package.json", before={}, after={})
    assert t.relative_path == "apps/package.json"


def test_write_preserves_tabs_and_trailing_newline(tmp_path):
    (tmp_path / "package.json").write_text('{\n\t"name": "a"\n}\n', encoding="utf-8")
    t = _transform(tmp_path, {"name": "a"}, {"name": "a", "packageManager": "npm@7.0.0"})

    t.write()

    assert (tmp_path / "package.json").read_text(encoding="utf-8") == (
        '{\n\t"name": "a",\n\t"packageManager": "npm@7.0.0"\n}\n'
    )


def test_write_creates_missing_file(tmp_path):
    t = _transform(tmp_path, None, {"packageManager": "npm@7.0.0"})

    t.write()

    assert (tmp_path / "package.json").read_text(encoding="utf-8") == (
        '{\n  "packageManager": "npm@7.0.0"\n}\n'
    )


def test_write_keeps_non_ascii_text(tmp_path):
    (tmp_path / "package.json").write_text('{\n  "description": "café"\n}\n', encoding="utf-8")
    t = _transform(tmp_path, {"description": "café"}, {"description": "café", "packageManager": "npm@7.0.0"})

    t.write()

    assert "café" in (tmp_path / "package.json").read_text(encoding="utf-8")


@pytest.mark.parametrize("content", ["{ nope", "[]", '"string"'])
def test_write_refuses_non_object_manifest(tmp_path, content):
    (tmp_path / "package.json").write_text(content, encoding="utf-8")
    t = _transform(tmp_path, None, {"packageManager": "npm@7.0.0"})

    with pytest.raises(ManifestError):
        t.write()

    assert (tmp_path / "package.json").read_text(encoding="utf-8") == content


def test_render_diff(tmp_path):
    t = _transform(tmp_path, {"packageManager": "turbo@1.7.0"}, {"packageManager": "pnpm@1.2.3"})

    diff = t.render_diff()

    assert diff.startswith("--- a/package.json\n+++ b/package.json\n")
    assert '-  "packageManager": "turbo@1.7.0"' in diff
    assert '+  "packageManager": "pnpm@1.2.3"' in diff
    assert not (tmp_path / "package.json").exists()


@pytest.mark.parametrize("old_value", [None, {"name": "npm", "v": "1"}, ["npm", "1"]])
def test_replacing_any_value_counts_one_of_each(tmp_path, old_value):
    t = _transform(tmp_path, {"name": "a", "packageManager": old_value}, {"name": "a", "packageManager": "npm@7.0.0"})
    assert (t.additions(), t.deletions()) == (1, 1)


def test_failed_replace_leaves_original_and_no_temp_file(tmp_path, monkeypatch):
    original = '{\n  "name": "a"\n}\n'
    (tmp_path / "package.json").write_text(original, encoding="utf-8")
    t = _transform(tmp_path, {"name": "a"}, {"name": "a", "packageManager": "npm@7.0.0"})

    def fail(src, dst):
        raise OSError(27, "File too large")

    monkeypatch.setattr(file_transform.os, "replace", fail)

    with pytest.raises(OSError):
        t.write()

    assert (tmp_path / "package.json").read_text(encoding="utf-8") == original
    assert [p.name for p in tmp_path.iterdir()] == ["package.json"]


def test_write_keeps_file_mode(tmp_path):
    path = tmp_path / "package.json"
    path.write_text('{\n  "name": "a"\n}\n', encoding="utf-8")
    path.chmod(0o644)
    t = _transform(tmp_path, {"name": "a"}, {"name": "a", "packageManager": "npm@7.0.0"})

    t.write()

    assert path.stat().st_mode & 0o777 == 0o644

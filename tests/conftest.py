"""Shared fixtures for codemod tests."""

from __future__ import annotations

import json
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def use_fixture(tmp_path: Path) -> Callable[[str], Path]:
    """Copy ``fixtures/add_package_manager/<name>`` into a temp dir and return it."""

    def _use(name: str) -> Path:
        root = tmp_path / name
        shutil.copytree(FIXTURES / "add_package_manager" / name, root)
        return root

    return _use


def read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))

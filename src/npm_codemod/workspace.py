"""Workspace detection from lockfiles and workspace manifests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Checked in order; the first marker found decides the package manager.
MARKERS: tuple[tuple[str, str], ...] = (
    ("pnpm-lock.yaml", "pnpm"),
    ("pnpm-workspace.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("package-lock.json", "npm"),
    ("npm-shrinkwrap.json", "npm"),
)


class WorkspaceNotFoundError(RuntimeError):
    """Raised when a directory is not a recognisable workspace root."""


@dataclass(slots=True, frozen=True)
class WorkspaceDetails:
    """What the detector learned about a workspace root."""

    root: Path
    package_manager: str
    workspace_globs: tuple[str, ...] = field(default_factory=tuple)


def detect_package_manager(root: Path) -> str | None:
    for marker, package_manager in MARKERS:
        if (root / marker).is_file():
            return package_manager
    return None


def _pnpm_globs(root: Path) -> list[str]:
    path = root / "pnpm-workspace.yaml"
    if not path.is_file():
        return []
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    packages = data.get("packages") if isinstance(data, dict) else None
    return [str(p) for p in packages or [] if isinstance(p, str)]


def _manifest_globs(manifest: dict[str, Any]) -> list[str]:
    workspaces = manifest.get("workspaces")
    # yarn also accepts {"packages": [...], "nohoist": [...]}
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    if not isinstance(workspaces, list):
        return []
    return [w for w in workspaces if isinstance(w, str)]


def get_workspace_details(root: Path) -> WorkspaceDetails:
    """Describe the workspace rooted at ``root``.

    Raises:
        WorkspaceNotFoundError: if ``root`` has no readable ``package.json`` or
            none of the known lockfiles / workspace files.
    """
    root = Path(root).resolve()
    manifest_path = root / "package.json"
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise WorkspaceNotFoundError(f"No readable package.json in {root}") from exc
    if not isinstance(manifest, dict):
        raise WorkspaceNotFoundError(f"{manifest_path} must contain a JSON object")

    package_manager = detect_package_manager(root)
    if package_manager is None:
        raise WorkspaceNotFoundError(f"Could not detect a package manager in {root}")

    if package_manager == "pnpm":
        globs = _pnpm_globs(root)
    else:
        globs = _manifest_globs(manifest)

    return WorkspaceDetails(
        root=root,
        package_manager=package_manager,
        workspace_globs=tuple(globs),
    )

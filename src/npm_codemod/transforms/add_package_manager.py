"""Set the ``packageManager`` key in the root ``package.json``.

The transform first plans the change (detect the workspace's package manager,
resolve its version, read the manifest) and then hands the planned manifest to
a ``Runner``, which decides whether to write it. Detection failures abort the
run before anything is written; all failures are returned on the result.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, TextIO, TypeAlias

from ..errors import PackageManagerUndeterminedError, TransformError, VersionUndeterminedError
from ..runner import Runner
from ..types import TransformerMeta, TransformerOptions, TransformerResult
from ..versions import get_available_package_managers
from ..workspace import get_workspace_details

logger = logging.getLogger(__name__)

META = TransformerMeta(
    name="add-package-manager",
    description="Set the `packageManager` key in root `package.json` file",
    introduced_in="1.1.0",
)

MANIFEST = "package.json"
FIELD = "packageManager"


class WorkspaceInfo(Protocol):
    package_manager: str


WorkspaceDetector: TypeAlias = Callable[[Path], WorkspaceInfo]
VersionResolver: TypeAlias = Callable[[], Mapping[str, str | None]]


@dataclass(slots=True, frozen=True)
class PackageManagerPlan:
    """Desired vs current ``packageManager`` value for one workspace root."""

    root: Path
    package_manager: str
    version: str
    existing: str | None
    manifest: dict[str, Any] | None

    @property
    def desired(self) -> str:
        return f"{self.package_manager}@{self.version}"

    @property
    def is_current(self) -> bool:
        return self.existing == self.desired

    def updated_manifest(self) -> dict[str, Any]:
        manifest = dict(self.manifest or {})
        manifest[FIELD] = self.desired
        return manifest


def read_manifest(root: Path) -> dict[str, Any] | None:
    """Return the parsed manifest, or None when it is missing or not a JSON object."""
    try:
        data = json.loads((root / MANIFEST).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


def plan(
    root: Path,
    *,
    detector: WorkspaceDetector = get_workspace_details,
    resolver: VersionResolver = get_available_package_managers,
) -> PackageManagerPlan:
    """Work out what ``packageManager`` should be for ``root``.

    Raises:
        PackageManagerUndeterminedError: if the detector fails for any reason.
        VersionUndeterminedError: if no version is known for the detected manager.
    """
    root = Path(root)
    try:
        details = detector(root)
        package_manager = details.package_manager
    except Exception as exc:
        raise PackageManagerUndeterminedError(root) from exc

    try:
        version = resolver().get(package_manager)
    except Exception as exc:
        raise VersionUndeterminedError(root, package_manager) from exc
    if not isinstance(version, str) or not version:
        raise VersionUndeterminedError(root, package_manager)

    manifest = read_manifest(root)
    existing = manifest.get(FIELD) if manifest is not None else None
    if not isinstance(existing, str):
        existing = None

    return PackageManagerPlan(
        root=root,
        package_manager=package_manager,
        version=version,
        existing=existing,
        manifest=manifest,
    )


def apply(change: PackageManagerPlan, runner: Runner) -> None:
    """Register the planned manifest with ``runner``."""
    if change.is_current:
        logger.debug("%s already set to %s", FIELD, change.desired)
    else:
        logger.info("Setting %s to %s in %s", FIELD, change.desired, change.root / MANIFEST)
    runner.modify_file(file_path=MANIFEST, before=change.manifest, after=change.updated_manifest())


def transformer(
    root: Path,
    options: TransformerOptions,
    *,
    detector: WorkspaceDetector = get_workspace_details,
    resolver: VersionResolver = get_available_package_managers,
    stream: TextIO | None = None,
) -> TransformerResult:
    """Run the add-package-manager transform against ``root``."""
    root = Path(root)
    runner = Runner(transformer=META, root_path=root, options=options, stream=stream)

    try:
        change = plan(root, detector=detector, resolver=resolver)
    except TransformError as exc:
        return runner.abort_transform(exc)

    apply(change, runner)
    return runner.finish()

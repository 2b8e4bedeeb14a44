"""Resolve available package manager versions.

Two resolvers are provided. ``get_available_package_managers`` asks each
installed binary for its version; ``RegistryVersionResolver`` looks up the
``latest`` dist-tag on an npm registry. Both return a mapping of manager name
to version, with ``None`` for managers whose version could not be determined.
"""

from __future__ import annotations

import logging
import subprocess

import requests
from jsonschema import Draft202012Validator
from packaging.version import InvalidVersion, Version
from requests import Response
from tenacity import retry, stop_after_attempt, wait_fixed

logger = logging.getLogger(__name__)

PACKAGE_MANAGERS = ("npm", "pnpm", "yarn", "bun")

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"

# Subset of the registry's "version" document that we rely on.
REGISTRY_DOCUMENT_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["name", "version"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "version": {"type": "string", "minLength": 1},
    },
}

_validator = Draft202012Validator(REGISTRY_DOCUMENT_SCHEMA)


def is_version(text: str) -> bool:
    """Return True for ``MAJOR.MINOR.PATCH`` versions, optionally with a pre-release."""
    if not text[:1].isdigit():
        return False
    try:
        version = Version(text)
    except InvalidVersion:
        return False
    return len(version.release) == 3


def _run_version_command(package_manager: str) -> str | None:
    try:
        completed = subprocess.run(
            [package_manager, "--version"],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("%s --version failed: %s", package_manager, exc)
        return None
    if completed.returncode != 0:
        return None
    output = completed.stdout.strip()
    return output or None


def get_available_package_managers() -> dict[str, str | None]:
    """Return the installed version of each known package manager."""
    available: dict[str, str | None] = {}
    for package_manager in PACKAGE_MANAGERS:
        version = _run_version_command(package_manager)
        if version is not None and not is_version(version):
            logger.debug("Ignoring unexpected %s version output: %r", package_manager, version)
            version = None
        available[package_manager] = version
    return available


class RegistryVersionResolver:
    """Resolve the latest published version of each package manager."""

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        package_managers: tuple[str, ...] = PACKAGE_MANAGERS,
    ) -> None:
        self.registry_url = registry_url.rstrip("/")
        self.package_managers = package_managers

    def __call__(self) -> dict[str, str | None]:
        return {name: self.latest_version(name) for name in self.package_managers}

    def latest_version(self, package_manager: str) -> str | None:
        url = f"{self.registry_url}/{package_manager}/latest"
        try:
            response = _http_get(url)
        except requests.RequestException as exc:  # pragma: no cover - network failure path
            logger.warning("Failed to query %s: %s", url, exc)
            return None

        if response.status_code != 200:
            logger.warning("Unexpected status code %s fetching %s", response.status_code, url)
            return None

        try:
            document = response.json()
        except ValueError:
            logger.warning("Registry returned invalid JSON for %s", package_manager)
            return None

        errors = sorted(_validator.iter_errors(document), key=lambda e: e.path)
        if errors:
            logger.warning(
                "Registry document for %s failed validation: %s",
                package_manager,
                errors[0].message,
            )
            return None

        version = document["version"]
        return version if is_version(version) else None


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_fixed(2))
def _http_get(url: str) -> Response:
    return requests.get(url, headers={"Accept": "application/json"}, timeout=10)

"""CLI entrypoint for the add-package-manager codemod.

Usage:
  npm-codemod [ROOT] [--dry] [--print] [--force] [--json]
              [--version-source installed|registry] [--registry-url URL]
              [--config PATH] [--log-level LEVEL]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import VERSION_SOURCES, ConfigError, Settings, load_settings
from .transforms import add_package_manager
from .types import TransformerOptions, TransformerResult
from .transforms.add_package_manager import VersionResolver
from .versions import RegistryVersionResolver, get_available_package_managers


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=add_package_manager.META.description)
    parser.add_argument("root", nargs="?", type=Path, default=Path("."))
    parser.add_argument("--dry", action="store_true", help="Report changes without writing them")
    parser.add_argument("--print", action="store_true", help="Print a diff of every change")
    parser.add_argument("--force", action="store_true")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--version-source", choices=VERSION_SOURCES, default=None)
    parser.add_argument("--registry-url", default=None)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--log-level", default=None)
    return parser.parse_args(argv)


def _resolver(settings: Settings) -> VersionResolver:
    if settings.version_source == "registry":
        return RegistryVersionResolver(settings.registry_url)
    return get_available_package_managers


def _render_summary(result: TransformerResult) -> str:
    lines = [f"{add_package_manager.META.name}:"]
    for path, change in result.changes.items():
        lines.append(f"  {change.action:<10} {path} (+{change.additions} -{change.deletions})")
    if not result.changes:
        lines.append("  no files changed")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
        overrides = {
            "versionSource": args.version_source or settings.version_source,
            "registryUrl": args.registry_url or settings.registry_url,
            "logLevel": args.log_level or settings.log_level,
        }
        settings = Settings.from_dict(overrides)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    options = TransformerOptions(force=args.force, dry=args.dry, print=args.print)
    result = add_package_manager.transformer(
        args.root.resolve(),
        options,
        resolver=_resolver(settings),
        # keep stdout parseable when it carries the JSON result
        stream=sys.stderr if args.json else None,
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(_render_summary(result))

    if result.fatal_error is not None:
        print(f"ERROR: {result.fatal_error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

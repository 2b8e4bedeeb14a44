"""Codemod transforms."""

from . import add_package_manager

__all__ = [
    "add_package_manager",
]

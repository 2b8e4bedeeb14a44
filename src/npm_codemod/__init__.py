"""npm-codemod core package.

Pins the ``packageManager`` field of a workspace's root ``package.json``. The
transform is usable as a library (inject your own workspace detector and
version resolver) and through the ``npm-codemod`` CLI.
"""

__all__ = [
    "config",
    "runner",
    "transforms",
    "types",
]

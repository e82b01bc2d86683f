"""Module discovery.

Walks a directory tree and returns a nested mapping: directories become
branches, loadable files become leaves pointing at their absolute path.
Entries are visited in name order so the result does not depend on the
filesystem's listing order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union


logger = logging.getLogger(__name__)

UNIT_EXTENSIONS: frozenset[str] = frozenset({".py"})
_SKIPPED_NAMES: frozenset[str] = frozenset({"__init__.py", "__pycache__"})

ModuleNode = Union[Path, "ModuleTree"]
ModuleTree = dict[str, ModuleNode]


def _skipped(entry: Path) -> bool:
    return entry.name in _SKIPPED_NAMES or entry.name.startswith(".")


def is_unit_file(path: Path) -> bool:
    return path.suffix in UNIT_EXTENSIONS


def scan(root_dir: str | Path) -> ModuleTree:
    """Scan `root_dir` recursively.

    A missing directory yields an empty tree. A directory that exists but
    cannot be listed yields an empty branch and a warning.
    """

    root = Path(root_dir).resolve()
    if not root.is_dir():
        return {}
    return _scan_dir(root)


def _scan_dir(directory: Path) -> ModuleTree:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.warning("Cannot read module directory %s: %s", directory, exc)
        return {}

    tree: ModuleTree = {}
    for entry in entries:
        if _skipped(entry):
            continue

        if entry.is_dir():
            tree[entry.name] = _scan_dir(entry)
        elif entry.is_file() and is_unit_file(entry):
            name = entry.stem
            if isinstance(tree.get(name), dict):
                logger.warning("Ignoring %s: a directory named %r already exists", entry, name)
                continue
            tree[name] = entry
    return tree


def iter_leaves(tree: ModuleTree) -> list[tuple[str, Path]]:
    """Top-level leaves of a tree, in tree order."""

    return [(name, node) for name, node in tree.items() if isinstance(node, Path)]

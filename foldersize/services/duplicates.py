from __future__ import annotations

import hashlib
import logging
from collections.abc import Collection

from result import Err, Ok

from foldersize.models.duplicates import DuplicateReport, DuplicateResult
from foldersize.models.scan import FsNode, ScanError, WalkStats
from foldersize.services.fs import DEFAULT_FS, FileSystem
from foldersize.services.walker import resolve_root, root_node, walk

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_NAMES: tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    ".vs",
    "Library",
    "Temp",
    "node_modules",
    "__pycache__",
    ".venv",
    ".mypy_cache",
)

_MASK = (1 << 64) - 1
_MULTIPLIER = 7
# Non-zero so an empty subdirectory still shifts its parent's hash.
_SEED = 1


def name_hash(name: str) -> int:
    return int.from_bytes(hashlib.blake2b(name.encode("utf-8"), digest_size=8).digest(), "big")


def _fold(acc: int, value: int) -> int:
    return (acc * _MULTIPLIER + value) & _MASK


def _hash_tree(
    root: FsNode,
    excluded_names: Collection[str],
    fs: FileSystem,
) -> tuple[int, dict[int, list[str]], WalkStats]:
    excluded = frozenset(excluded_names)
    running: dict[str, int] = {}
    hashes: dict[int, list[str]] = {}
    root_value = _SEED

    def on_file(node: FsNode) -> None:
        if node.parent is None:
            return
        running[node.parent] = _fold(running.get(node.parent, _SEED), name_hash(node.name))

    def on_dir(node: FsNode) -> None:
        nonlocal root_value
        value = running.pop(node.path, _SEED)
        hashes.setdefault(value, []).append(node.path)
        logger.debug("Hashed %s -> %016x", node.path, value)
        if node.parent is None:
            root_value = value
        else:
            running[node.parent] = _fold(running.get(node.parent, _SEED), value)

    stats = walk(root, on_dir=on_dir, on_file=on_file, fs=fs, prune=lambda n: n.name in excluded)
    return root_value, hashes, stats


def tree_hash(
    path: str,
    excluded_names: Collection[str] = DEFAULT_EXCLUDED_NAMES,
    fs: FileSystem = DEFAULT_FS,
) -> int:
    """Structural hash of the single tree rooted at *path*.

    Subdirectory hashes are folded in first, then the names of the files.
    File contents are never read.
    """
    value, _, _ = _hash_tree(root_node(path), excluded_names, fs)
    return value


def _listing(path: str, fs: FileSystem) -> list[str]:
    dirs: list[str] = []
    files: list[str] = []
    try:
        for entry in fs.scandir(path):
            if entry.stat is not None and entry.stat.is_dir:
                dirs.append(entry.path)
            else:
                files.append(entry.path)
    except OSError as exc:
        logger.warning("Could not list %s: %s", path, exc)
    return dirs + files


def find_duplicate_trees(
    path: str,
    excluded_names: Collection[str] = DEFAULT_EXCLUDED_NAMES,
    fs: FileSystem = DEFAULT_FS,
) -> DuplicateResult:
    resolved = resolve_root(path, fs)
    if isinstance(resolved, ScanError):
        return Err(resolved)

    _, hashes, stats = _hash_tree(root_node(resolved), excluded_names, fs)
    report = DuplicateReport(root=resolved, hashes=hashes, stats=stats)
    for value, paths in hashes.items():
        if len(paths) > 1:
            report.listings[value] = _listing(paths[0], fs)
    logger.debug("Walk complete: %d distinct hashes, %d groups", len(hashes), len(report.listings))
    return Ok(report)

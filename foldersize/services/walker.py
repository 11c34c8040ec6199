from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeAlias

from foldersize.models.enums import NodeKind
from foldersize.models.scan import FsNode, ScanError, ScanErrorCode, WalkStats
from foldersize.services.fs import DEFAULT_FS, FileSystem

logger = logging.getLogger(__name__)

Visitor: TypeAlias = Callable[[FsNode], None]
Prune: TypeAlias = Callable[[FsNode], bool]


@dataclass(slots=True)
class _Frame:
    node: FsNode
    # Stored reversed so pop() yields enumeration order.
    pending_dirs: list[FsNode] = field(default_factory=list)
    files: list[FsNode] = field(default_factory=list)


def resolve_root(path: str, fs: FileSystem = DEFAULT_FS) -> str | ScanError:
    """Validate and resolve a walk root path.

    Returns the resolved absolute path, or a ``ScanError`` on failure.
    """
    expanded = fs.expanduser(path)
    if not fs.exists(expanded):
        return ScanError(
            code=ScanErrorCode.NOT_FOUND,
            path=expanded,
            message="Path does not exist",
        )

    resolved = fs.absolute(expanded)
    try:
        root_stat = fs.stat(resolved)
    except OSError as exc:
        return ScanError(
            code=ScanErrorCode.ROOT_STAT_FAILED,
            path=resolved,
            message=f"Cannot stat root: {exc}",
        )
    if not root_stat.is_dir:
        return ScanError(
            code=ScanErrorCode.NOT_DIRECTORY,
            path=resolved,
            message="Path is not a directory",
        )
    return resolved


def root_node(resolved_root: str) -> FsNode:
    name = os.path.basename(resolved_root.rstrip("/\\")) or resolved_root
    return FsNode(path=resolved_root, name=name, kind=NodeKind.DIRECTORY, size_bytes=0, depth=0)


def _open(node: FsNode, fs: FileSystem, stats: WalkStats, prune: Prune | None) -> _Frame:
    frame = _Frame(node)
    try:
        entries = list(fs.scandir(node.path))
    except OSError as exc:
        stats.access_errors += 1
        logger.warning("Could not read %s: %s", node.path, exc)
        return frame

    dirs: list[FsNode] = []
    for entry in entries:
        st = entry.stat
        if st is None:
            stats.access_errors += 1
            logger.warning("Could not stat %s", entry.path)
            continue
        child = FsNode(
            path=entry.path,
            name=entry.name,
            kind=NodeKind.DIRECTORY if st.is_dir else NodeKind.FILE,
            size_bytes=0 if st.is_dir else st.size,
            depth=node.depth + 1,
            parent=node.path,
        )
        if child.is_dir:
            if prune is not None and prune(child):
                logger.debug("Skipping %s", child.path)
                continue
            dirs.append(child)
        else:
            frame.files.append(child)
    dirs.reverse()
    frame.pending_dirs = dirs
    return frame


def walk(
    root: FsNode,
    on_dir: Visitor | None = None,
    on_file: Visitor | None = None,
    fs: FileSystem = DEFAULT_FS,
    prune: Prune | None = None,
) -> WalkStats:
    """Visit every file and directory below *root* exactly once.

    Directories are reported post-order: a directory's subdirectories are
    walked (each followed by its own ``on_dir``), then its files go to
    ``on_file``, then the directory itself goes to ``on_dir``. The root is
    reported last, at depth 0. A directory that cannot be listed is logged,
    counted in ``access_errors`` and reported as if it were empty.
    """
    stats = WalkStats(directories=1)
    stack: list[_Frame] = [_open(root, fs, stats, prune)]
    while stack:
        frame = stack[-1]
        if frame.pending_dirs:
            child = frame.pending_dirs.pop()
            stats.directories += 1
            stack.append(_open(child, fs, stats, prune))
            continue

        stack.pop()
        for node in frame.files:
            stats.files += 1
            if on_file is not None:
                on_file(node)
        if on_dir is not None:
            on_dir(frame.node)
    return stats

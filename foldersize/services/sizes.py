from __future__ import annotations

import logging
from collections import defaultdict

from result import Err, Ok

from foldersize.models.enums import InclusionReason
from foldersize.models.scan import FsNode, ScanError, SizeEntry, SizeOptions, SizeReport, SizeResult
from foldersize.services.fs import DEFAULT_FS, FileSystem
from foldersize.services.walker import resolve_root, root_node, walk

logger = logging.getLogger(__name__)


def _level(node: FsNode) -> int:
    # Direct children of the root sit at level 0.
    return node.depth - 1


def _dir_reason(node: FsNode, size: int, options: SizeOptions) -> InclusionReason | None:
    if _level(node) <= options.max_depth:
        return InclusionReason.DEPTH
    if node.name in options.always_show:
        return InclusionReason.ALWAYS_SHOW
    if options.large_threshold is not None and size > options.large_threshold:
        return InclusionReason.LARGE
    return None


def aggregate(path: str, options: SizeOptions, fs: FileSystem = DEFAULT_FS) -> SizeResult:
    resolved = resolve_root(path, fs)
    if isinstance(resolved, ScanError):
        return Err(resolved)

    root = root_node(resolved)
    running: defaultdict[str, int] = defaultdict(int)
    entries: list[SizeEntry] = []

    def on_file(node: FsNode) -> None:
        if node.parent is None:
            return
        running[node.parent] += node.size_bytes
        if _level(node) <= options.max_depth:
            entries.append(SizeEntry(node=node, size_bytes=node.size_bytes, reason=InclusionReason.DEPTH))

    def on_dir(node: FsNode) -> None:
        node.size_bytes = running.pop(node.path, 0)
        if node.parent is None:
            return
        # A directory always counts in full towards its parent, shown or not.
        running[node.parent] += node.size_bytes
        reason = _dir_reason(node, node.size_bytes, options)
        if reason is not None:
            entries.append(SizeEntry(node=node, size_bytes=node.size_bytes, reason=reason))

    stats = walk(root, on_dir=on_dir, on_file=on_file, fs=fs)
    logger.debug(
        "Aggregated %s: %d bytes, %d dirs, %d files, %d reportable",
        root.path,
        root.size_bytes,
        stats.directories,
        stats.files,
        len(entries),
    )
    return Ok(SizeReport(root=root, total_bytes=root.size_bytes, entries=entries, stats=stats))

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable
from typing import TypeAlias

from result import Err, Ok

from foldersize.models.collisions import (
    Canonical,
    Collision,
    CollisionGroup,
    Decision,
    ReconcileReport,
    ReconcileResult,
    ReportLine,
)
from foldersize.models.enums import Action, LineLevel, NodeKind
from foldersize.models.scan import FsNode, ScanError
from foldersize.services.duplicates import tree_hash
from foldersize.services.fs import DEFAULT_FS, FileSystem
from foldersize.services.walker import resolve_root, root_node, walk

logger = logging.getLogger(__name__)

DEFAULT_MARKER = ".badfile"

_SUFFIX_RE = re.compile(r" \((\d+)\)$")

LineSink: TypeAlias = Callable[[ReportLine], None]


def split_collision(stem: str) -> tuple[str, int] | None:
    """Strip a trailing ``" (N)"`` from *stem*, returning ``(base, N)``."""
    match = _SUFFIX_RE.search(stem)
    if match is None or not match.start():
        return None
    ordinal = int(match.group(1))
    if ordinal < 1:
        return None
    return stem[: match.start()], ordinal


def canonical_key(node: FsNode) -> tuple[str, int] | None:
    """Return ``(canonical path, ordinal)`` when *node* carries a collision suffix."""
    if node.parent is None:
        return None
    if node.is_dir:
        stem, ext = node.name, ""
    else:
        base, dot, extension = node.name.rpartition(".")
        stem, ext = (base, dot + extension) if dot else (node.name, "")
    split = split_collision(stem)
    if split is None:
        return None
    base_stem, ordinal = split
    return os.path.join(node.parent, base_stem + ext), ordinal


def files_equal(fs: FileSystem, first: str, second: str) -> bool:
    if fs.stat(first).size != fs.stat(second).size:
        return False
    return fs.read_bytes(first) == fs.read_bytes(second)


class CollisionReconciler:
    """Pair ``name`` with ``name (1)`` entries and clean up the broken half.

    Only one case is ever acted on: a canonical entry and its ``(1)`` copy
    where exactly one of the two is empty. Everything else is reported.
    With ``dry_run`` the same decisions are logged but nothing is touched.
    """

    def __init__(
        self,
        *,
        dry_run: bool = True,
        exclusions: frozenset[str] = frozenset(),
        compare_contents: bool = True,
        marker: str = DEFAULT_MARKER,
        fs: FileSystem = DEFAULT_FS,
        on_line: LineSink | None = None,
    ) -> None:
        self._dry_run = dry_run
        self._exclusions = exclusions
        self._compare = compare_contents
        self._marker = marker
        self._fs = fs
        self._on_line = on_line
        self._report: ReconcileReport | None = None

    def reconcile(self, path: str) -> ReconcileResult:
        resolved = resolve_root(path, self._fs)
        if isinstance(resolved, ScanError):
            return Err(resolved)

        report = ReconcileReport(root=resolved, dry_run=self._dry_run)
        self._report = report
        files: dict[str, CollisionGroup] = {}
        folders: dict[str, CollisionGroup] = {}

        def record(node: FsNode) -> None:
            if node.parent is None or node.path in self._exclusions:
                return
            groups = folders if node.is_dir else files
            derived = canonical_key(node)
            if derived is not None:
                key, ordinal = derived
                _group(groups, key, node.kind).members.append(Collision(node.path, ordinal))
            _group(groups, node.path, node.kind).members.append(Canonical(node.path))

        report.stats = walk(
            root_node(resolved),
            on_dir=record,
            on_file=record,
            fs=self._fs,
            prune=lambda n: n.path in self._exclusions,
        )

        for groups, label in ((files, "File"), (folders, "Folder")):
            for group in groups.values():
                if len(group.members) != 2:
                    continue
                self._emit(LineLevel.INFO, f"{label}:{group.key}")
                report.decisions.append(self._resolve(group))
                self._emit(LineLevel.INFO, "")

        first_above = True
        for groups, label in ((files, "File"), (folders, "Folder")):
            for group in groups.values():
                if len(group.members) <= 2:
                    continue
                if first_above:
                    first_above = False
                    self._emit(LineLevel.FLAGGED, "ABOVE 2 SAME")
                decision = Decision(key=group.key, kind=group.kind, action=Action.FLAGGED)
                self._emit(LineLevel.FLAGGED, f"{label}:{group.key}", decision)
                for member in group.members:
                    self._emit(LineLevel.FLAGGED, f"    {member.path}", decision)
                report.decisions.append(decision)
                report.flagged.append(group)

        self._report = None
        return Ok(report)

    def _emit(self, level: LineLevel, text: str, decision: Decision | None = None) -> None:
        line = ReportLine(level, text)
        if self._report is not None:
            self._report.lines.append(line)
        if decision is not None:
            decision.lines.append(line)
        if self._on_line is not None:
            self._on_line(line)

    def _resolve(self, group: CollisionGroup) -> Decision:
        decision = Decision(key=group.key, kind=group.kind, action=Action.NONE)
        first, second = group.members
        match (first, second):
            case (Canonical(), Canonical()):
                decision.action = Action.CONFLICT_BOTH_CANONICAL
                self._emit(LineLevel.ERROR, f"Both entries canonical {group.key}", decision)
            case (Canonical() as real, Collision() as copy) | (Collision() as copy, Canonical() as real):
                self._resolve_pair(group.kind, real, copy, decision)
            case _:
                decision.action = Action.CONFLICT_ORDINAL
                self._emit(LineLevel.ERROR, f"No canonical entry for {group.key}", decision)
        return decision

    def _length(self, kind: NodeKind, path: str) -> int:
        if kind is NodeKind.DIRECTORY:
            return sum(1 for _ in self._fs.scandir(path))
        return self._fs.stat(path).size

    def _same(self, kind: NodeKind, first: str, second: str) -> bool:
        if kind is NodeKind.DIRECTORY:
            return tree_hash(first, (), self._fs) == tree_hash(second, (), self._fs)
        return files_equal(self._fs, first, second)

    def _resolve_pair(self, kind: NodeKind, real: Canonical, copy: Collision, decision: Decision) -> None:
        copy_name = os.path.basename(copy.path)
        real_name = os.path.basename(real.path)
        if copy.ordinal != 1:
            decision.action = Action.CONFLICT_ORDINAL
            self._emit(LineLevel.ERROR, f"Unexpected collision suffix ({copy.ordinal}) on {copy_name}", decision)
            return

        try:
            real_len = self._length(kind, real.path)
            copy_len = self._length(kind, copy.path)
        except OSError as exc:
            self._emit(LineLevel.ERROR, f"Could not inspect {decision.key}: {exc}", decision)
            return

        if real_len > 0 and copy_len > 0:
            decision.action = Action.CONFLICT_BOTH_NONZERO
            if not self._compare:
                self._emit(LineLevel.ERROR, "Both have size", decision)
                return
            try:
                decision.same_content = self._same(kind, real.path, copy.path)
            except OSError as exc:
                self._emit(LineLevel.ERROR, f"Both have size, compare failed: {exc}", decision)
                return
            self._emit(LineLevel.ERROR, f"Both have size, same={decision.same_content}", decision)
            return
        if real_len == 0 and copy_len == 0:
            decision.action = Action.CONFLICT_BOTH_ZERO
            self._emit(LineLevel.ERROR, "Both zero", decision)
            return

        if real_len > 0:
            decision.action = Action.DELETE_COPY
            self._emit(LineLevel.INFO, f"Delete {copy_name} - {copy_len}", decision)
            if not self._dry_run:
                self._apply(decision, lambda: self._delete(kind, copy.path))
            return

        parked = real.path + self._marker
        if self._fs.exists(parked):
            decision.action = Action.CONFLICT_MARKER_EXISTS
            self._emit(LineLevel.ERROR, f"Marker path {os.path.basename(parked)} already exists", decision)
            return

        decision.action = Action.REPLACE_CANONICAL
        self._emit(LineLevel.INFO, f"Rename {copy_name} - {copy_len}", decision)
        self._emit(LineLevel.INFO, f"Delete {real_name} - {real_len}", decision)
        if not self._dry_run:
            self._apply(decision, lambda: self._replace(kind, real.path, copy.path, parked))

    def _apply(self, decision: Decision, mutation: Callable[[], None]) -> None:
        try:
            mutation()
        except OSError as exc:
            self._emit(LineLevel.ERROR, f"Failed to fix {decision.key}: {exc}", decision)
            return
        decision.applied = True
        logger.info("Applied %s for %s", decision.action.value, decision.key)

    def _delete(self, kind: NodeKind, path: str) -> None:
        if kind is NodeKind.DIRECTORY:
            self._fs.rmdir(path)
        else:
            self._fs.remove(path)

    def _replace(self, kind: NodeKind, real: str, copy: str, parked: str) -> None:
        # The empty original has to be moved off its name before it can be
        # deleted, so park it under a marker and remove it last.
        self._fs.rename(real, parked)
        try:
            self._fs.rename(copy, real)
        except OSError:
            self._fs.rename(parked, real)
            raise
        self._delete(kind, parked)


def _group(groups: dict[str, CollisionGroup], key: str, kind: NodeKind) -> CollisionGroup:
    group = groups.get(key)
    if group is None:
        group = CollisionGroup(key=key, kind=kind)
        groups[key] = group
    return group

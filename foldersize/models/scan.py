from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from result import Result

from foldersize.models.enums import InclusionReason, NodeKind


@dataclass(slots=True)
class FsNode:
    path: str
    name: str
    kind: NodeKind
    size_bytes: int
    depth: int
    parent: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY


@dataclass(slots=True)
class WalkStats:
    files: int = 0
    directories: int = 0
    access_errors: int = 0


@dataclass(slots=True, frozen=True)
class SizeOptions:
    max_depth: int = 1
    always_show: frozenset[str] = frozenset()
    large_threshold: int | None = None


@dataclass(slots=True, frozen=True)
class SizeEntry:
    node: FsNode
    size_bytes: int
    reason: InclusionReason


@dataclass(slots=True)
class SizeReport:
    root: FsNode
    total_bytes: int
    entries: list[SizeEntry] = field(default_factory=list)
    stats: WalkStats = field(default_factory=WalkStats)

    def sorted_entries(self) -> list[SizeEntry]:
        """Entries largest first; ties keep traversal order."""
        return sorted(self.entries, key=lambda e: e.size_bytes, reverse=True)


class ScanErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    NOT_DIRECTORY = "not_directory"
    ROOT_STAT_FAILED = "root_stat_failed"


@dataclass(slots=True, frozen=True)
class ScanError:
    code: ScanErrorCode
    path: str
    message: str


SizeResult = Result[SizeReport, ScanError]

from __future__ import annotations

from dataclasses import dataclass, field

from result import Result

from foldersize.models.scan import ScanError, WalkStats


@dataclass(slots=True, frozen=True)
class DuplicateGroup:
    tree_hash: int
    paths: list[str]
    # Immediate children of paths[0]: subdirectories first, then files.
    first_children: list[str] = field(default_factory=list)


@dataclass(slots=True)
class DuplicateReport:
    root: str
    hashes: dict[int, list[str]] = field(default_factory=dict)
    listings: dict[int, list[str]] = field(default_factory=dict)
    stats: WalkStats = field(default_factory=WalkStats)

    def groups(self) -> list[DuplicateGroup]:
        """Hash buckets holding more than one directory, in discovery order.

        Equal hashes only mark candidates: the accumulator can collide, so
        members still need a manual look before anything is removed.
        """
        return [
            DuplicateGroup(tree_hash=h, paths=list(paths), first_children=list(self.listings.get(h, [])))
            for h, paths in self.hashes.items()
            if len(paths) > 1
        ]


DuplicateResult = Result[DuplicateReport, ScanError]

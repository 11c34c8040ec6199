from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from result import Result

from foldersize.models.enums import Action, LineLevel, NodeKind
from foldersize.models.scan import ScanError, WalkStats


@dataclass(slots=True, frozen=True)
class Canonical:
    path: str


@dataclass(slots=True, frozen=True)
class Collision:
    path: str
    ordinal: int = 1


Member: TypeAlias = Canonical | Collision


@dataclass(slots=True)
class CollisionGroup:
    key: str
    kind: NodeKind
    members: list[Member] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ReportLine:
    level: LineLevel
    text: str


@dataclass(slots=True)
class Decision:
    key: str
    kind: NodeKind
    action: Action
    lines: list[ReportLine] = field(default_factory=list)
    same_content: bool | None = None
    applied: bool = False


@dataclass(slots=True)
class ReconcileReport:
    root: str
    dry_run: bool
    decisions: list[Decision] = field(default_factory=list)
    flagged: list[CollisionGroup] = field(default_factory=list)
    lines: list[ReportLine] = field(default_factory=list)
    stats: WalkStats = field(default_factory=WalkStats)

    def by_action(self, action: Action) -> list[Decision]:
        return [d for d in self.decisions if d.action is action]


ReconcileResult = Result[ReconcileReport, ScanError]

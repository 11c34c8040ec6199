from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class AppConfig:
    max_depth: int = 1
    always_show: list[str] = field(default_factory=list)
    large_threshold: int = 500_000_000
    excluded_dir_names: list[str] = field(default_factory=list)
    duplicates_log: str = "find-dups.log"
    collision_marker: str = ".badfile"
    compare_contents: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "maxDepth": self.max_depth,
            "alwaysShow": self.always_show,
            "largeThreshold": self.large_threshold,
            "excludedDirNames": self.excluded_dir_names,
            "duplicatesLog": self.duplicates_log,
            "collisionMarker": self.collision_marker,
            "compareContents": self.compare_contents,
        }


def from_dict(data: dict[str, Any], defaults: AppConfig) -> AppConfig:
    marker = str(data.get("collisionMarker", defaults.collision_marker))
    return AppConfig(
        max_depth=int(data.get("maxDepth", defaults.max_depth)),
        always_show=[str(x) for x in data.get("alwaysShow", defaults.always_show)],
        large_threshold=max(0, int(data.get("largeThreshold", defaults.large_threshold))),
        excluded_dir_names=[str(x) for x in data.get("excludedDirNames", defaults.excluded_dir_names)],
        duplicates_log=str(data.get("duplicatesLog", defaults.duplicates_log)),
        collision_marker=marker or defaults.collision_marker,
        compare_contents=bool(data.get("compareContents", defaults.compare_contents)),
    )

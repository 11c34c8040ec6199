from __future__ import annotations

from enum import Enum


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class InclusionReason(str, Enum):
    DEPTH = "depth"
    ALWAYS_SHOW = "always_show"
    LARGE = "large"


class Action(str, Enum):
    NONE = "none"
    DELETE_COPY = "delete_copy"
    REPLACE_CANONICAL = "replace_canonical"
    CONFLICT_BOTH_NONZERO = "conflict_both_nonzero"
    CONFLICT_BOTH_ZERO = "conflict_both_zero"
    CONFLICT_BOTH_CANONICAL = "conflict_both_canonical"
    CONFLICT_ORDINAL = "conflict_ordinal"
    CONFLICT_MARKER_EXISTS = "conflict_marker_exists"
    FLAGGED = "flagged"


class LineLevel(str, Enum):
    INFO = "info"
    ERROR = "error"
    FLAGGED = "flagged"

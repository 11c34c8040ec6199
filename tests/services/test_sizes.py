from __future__ import annotations

import pytest
from result import Err, Ok

from foldersize.models.enums import InclusionReason
from foldersize.models.scan import ScanErrorCode, SizeOptions, SizeReport
from foldersize.services.sizes import aggregate
from tests.fs_mock import MemoryFileSystem


def _fs() -> MemoryFileSystem:
    return (
        MemoryFileSystem()
        .add_file("/root/a/a1.bin", size=100)
        .add_file("/root/a/sub/s.bin", size=50)
        .add_file("/root/a/sub/deep/d.bin", size=25)
        .add_file("/root/b.bin", size=10)
    )


def _report(options: SizeOptions, fs: MemoryFileSystem | None = None) -> SizeReport:
    result = aggregate("/root", options, fs=fs or _fs())
    assert isinstance(result, Ok)
    return result.unwrap()


def _names(report: SizeReport) -> list[str]:
    return [entry.node.name for entry in report.sorted_entries()]


@pytest.mark.parametrize("max_depth", [-1, 0, 1, 2, 10])
@pytest.mark.parametrize("threshold", [None, 0, 60])
def test_total_is_independent_of_policy(max_depth: int, threshold: int | None) -> None:
    report = _report(SizeOptions(max_depth=max_depth, always_show=frozenset({"deep"}), large_threshold=threshold))

    assert report.total_bytes == 185


def test_depth_zero_reports_direct_children_only() -> None:
    report = _report(SizeOptions(max_depth=0))

    assert _names(report) == ["a", "b.bin"]
    assert [e.size_bytes for e in report.sorted_entries()] == [175, 10]


def test_depth_one_adds_grandchildren() -> None:
    report = _report(SizeOptions(max_depth=1))

    assert _names(report) == ["a", "a1.bin", "sub", "b.bin"]
    assert all(e.reason is InclusionReason.DEPTH for e in report.entries)


def test_depth_two_stops_above_level_three() -> None:
    names = _names(_report(SizeOptions(max_depth=2)))

    assert {"s.bin", "deep"} <= set(names)
    assert "d.bin" not in names


def test_negative_depth_reports_nothing() -> None:
    assert _report(SizeOptions(max_depth=-1)).entries == []


def test_always_show_by_name() -> None:
    report = _report(SizeOptions(max_depth=0, always_show=frozenset({"deep"})))

    deep = next(e for e in report.entries if e.node.name == "deep")
    assert deep.reason is InclusionReason.ALWAYS_SHOW
    assert deep.size_bytes == 25


def test_always_show_does_not_apply_to_files() -> None:
    report = _report(SizeOptions(max_depth=-1, always_show=frozenset({"b.bin"})))

    assert report.entries == []


def test_large_threshold_uses_the_folder_own_size() -> None:
    report = _report(SizeOptions(max_depth=0, large_threshold=60))

    reasons = {e.node.name: e.reason for e in report.entries}
    assert reasons == {"a": InclusionReason.DEPTH, "sub": InclusionReason.LARGE, "b.bin": InclusionReason.DEPTH}


def test_depth_rule_wins_over_others() -> None:
    report = _report(SizeOptions(max_depth=1, always_show=frozenset({"sub"}), large_threshold=0))

    sub = next(e for e in report.entries if e.node.name == "sub")
    assert sub.reason is InclusionReason.DEPTH


def test_sort_is_descending_and_stable() -> None:
    fs = (
        MemoryFileSystem()
        .add_file("/root/x.bin", size=5)
        .add_file("/root/big.bin", size=50)
        .add_file("/root/y.bin", size=5)
    )

    report = _report(SizeOptions(max_depth=0), fs)

    assert _names(report) == ["big.bin", "x.bin", "y.bin"]
    sizes = [e.size_bytes for e in report.sorted_entries()]
    assert sizes == sorted(sizes, reverse=True)


def test_unreadable_subtree_contributes_zero() -> None:
    report = _report(SizeOptions(max_depth=1), _fs().deny("/root/a/sub"))

    assert report.total_bytes == 110
    assert report.stats.access_errors == 1
    sub = next(e for e in report.entries if e.node.name == "sub")
    assert sub.size_bytes == 0


def test_missing_root_returns_error() -> None:
    result = aggregate("/missing", SizeOptions(), fs=MemoryFileSystem())

    assert isinstance(result, Err)
    assert result.unwrap_err().code is ScanErrorCode.NOT_FOUND

from __future__ import annotations

from result import Err, Ok

from foldersize.models.duplicates import DuplicateReport
from foldersize.models.scan import ScanErrorCode
from foldersize.services.duplicates import find_duplicate_trees, name_hash, tree_hash
from tests.fs_mock import MemoryFileSystem


def _copy_tree(fs: MemoryFileSystem, base: str) -> MemoryFileSystem:
    return (
        fs.add_file(f"{base}/x.txt", size=1)
        .add_file(f"{base}/y.txt", size=2)
        .add_file(f"{base}/inner/z.txt", size=3)
    )


def _report(fs: MemoryFileSystem) -> DuplicateReport:
    result = find_duplicate_trees("/root", fs=fs)
    assert isinstance(result, Ok)
    return result.unwrap()


def test_identical_trees_share_a_group() -> None:
    fs = MemoryFileSystem()
    _copy_tree(fs, "/root/one")
    _copy_tree(fs, "/root/two")

    report = _report(fs)

    group = next(g for g in report.groups() if "/root/one" in g.paths)
    assert group.paths == ["/root/one", "/root/two"]
    assert group.first_children == ["/root/one/inner", "/root/one/x.txt", "/root/one/y.txt"]
    inner = next(g for g in report.groups() if "/root/one/inner" in g.paths)
    assert inner.paths == ["/root/one/inner", "/root/two/inner"]


def test_file_contents_are_not_hashed() -> None:
    first = MemoryFileSystem().add_file("/t/a.txt", content="one")
    second = MemoryFileSystem().add_file("/t/a.txt", content="something else")

    assert tree_hash("/t", fs=first) == tree_hash("/t", fs=second)


def test_renaming_a_file_changes_the_hash() -> None:
    first = MemoryFileSystem().add_file("/t/a.txt", size=1)
    second = MemoryFileSystem().add_file("/t/b.txt", size=1)

    assert tree_hash("/t", fs=first) != tree_hash("/t", fs=second)


def test_adding_children_changes_the_hash() -> None:
    base = MemoryFileSystem().add_file("/t/a.txt", size=1)
    with_file = MemoryFileSystem().add_file("/t/a.txt", size=1).add_file("/t/b.txt", size=1)
    with_empty_dir = MemoryFileSystem().add_dir("/t/sub").add_file("/t/a.txt", size=1)

    values = {tree_hash("/t", fs=fs) for fs in (base, with_file, with_empty_dir)}
    assert len(values) == 3


def test_hash_is_deterministic() -> None:
    fs = _copy_tree(MemoryFileSystem(), "/root/one")

    assert tree_hash("/root/one", fs=fs) == tree_hash("/root/one", fs=fs)
    assert name_hash("x.txt") == name_hash("x.txt")
    assert 0 <= tree_hash("/root/one", fs=fs) < 2**64


def test_excluded_directories_contribute_nothing() -> None:
    with_git = MemoryFileSystem().add_file("/p/a.txt", size=1).add_file("/p/.git/config", size=1)
    without = MemoryFileSystem().add_file("/p/a.txt", size=1)

    assert tree_hash("/p", fs=with_git) == tree_hash("/p", fs=without)

    result = find_duplicate_trees("/p", fs=with_git)
    assert isinstance(result, Ok)
    all_paths = [p for paths in result.unwrap().hashes.values() for p in paths]
    assert "/p/.git" not in all_paths


def test_custom_exclusions() -> None:
    fs = _copy_tree(MemoryFileSystem(), "/root/one")
    _copy_tree(fs, "/root/two")

    result = find_duplicate_trees("/root", excluded_names=["two"], fs=fs)

    assert isinstance(result, Ok)
    assert all("/root/two" not in g.paths for g in result.unwrap().groups())


def test_unique_trees_produce_no_groups() -> None:
    fs = MemoryFileSystem().add_file("/root/one/a.txt", size=1).add_file("/root/two/b.txt", size=1)

    assert _report(fs).groups() == []


def test_equal_structure_is_only_a_candidate() -> None:
    # Same names in different content still group: callers must verify.
    fs = (
        MemoryFileSystem()
        .add_file("/root/one/a.txt", content="left")
        .add_file("/root/two/a.txt", content="right")
    )

    assert [g.paths for g in _report(fs).groups()] == [["/root/one", "/root/two"]]


def test_missing_root_returns_error() -> None:
    result = find_duplicate_trees("/missing", fs=MemoryFileSystem())

    assert isinstance(result, Err)
    assert result.unwrap_err().code is ScanErrorCode.NOT_FOUND

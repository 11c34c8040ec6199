from __future__ import annotations

import os
import tempfile

from result import Ok

from foldersize.models.scan import SizeOptions
from foldersize.services.collisions import CollisionReconciler
from foldersize.services.sizes import aggregate


def _write(path: str, data: bytes) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)


def test_aggregate_on_disk() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        _write(os.path.join(tmpdir, "a.txt"), b"x" * 100)
        _write(os.path.join(tmpdir, "sub", "b.txt"), b"y" * 200)

        result = aggregate(tmpdir, SizeOptions(max_depth=0))

        assert isinstance(result, Ok)
        report = result.unwrap()
        assert report.total_bytes == 300
        assert [e.node.name for e in report.sorted_entries()] == ["sub", "a.txt"]


def test_reconcile_on_disk() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        real = os.path.join(tmpdir, "report.pdf")
        copy = os.path.join(tmpdir, "report (1).pdf")
        _write(real, b"")
        _write(copy, b"%PDF-1.7")

        result = CollisionReconciler(dry_run=False).reconcile(tmpdir)

        assert isinstance(result, Ok)
        assert sorted(os.listdir(tmpdir)) == ["report.pdf"]
        with open(real, "rb") as f:
            assert f.read() == b"%PDF-1.7"


def test_reconcile_on_disk_keeps_existing_marker_file() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        _write(os.path.join(tmpdir, "foo.txt"), b"")
        _write(os.path.join(tmpdir, "foo (1).txt"), b"0123456789")
        _write(os.path.join(tmpdir, "foo.txt.badfile"), b"USER DATA")

        result = CollisionReconciler(dry_run=False).reconcile(tmpdir)

        assert isinstance(result, Ok)
        assert sorted(os.listdir(tmpdir)) == ["foo (1).txt", "foo.txt", "foo.txt.badfile"]
        with open(os.path.join(tmpdir, "foo.txt.badfile"), "rb") as f:
            assert f.read() == b"USER DATA"

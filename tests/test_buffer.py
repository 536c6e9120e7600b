import os

import pytest

from scriptio.docs import buffer as buffer_mod
from scriptio.docs.buffer import ExportBuffer, atomic_write
from scriptio.errors import IOFailure


def test_atomic_write_replaces_file(tmp_path):
    target = tmp_path / "out" / "script.fdx"
    assert atomic_write(str(target), b"first") == str(target)
    atomic_write(str(target), b"second")
    assert target.read_bytes() == b"second"
    assert os.listdir(target.parent) == ["script.fdx"]


def test_atomic_write_failure_keeps_destination_and_removes_temp(tmp_path, monkeypatch):
    target = tmp_path / "script.pdf"
    target.write_bytes(b"original")

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(buffer_mod.os, "replace", fail_replace)
    with pytest.raises(IOFailure):
        atomic_write(str(target), b"new content")
    assert target.read_bytes() == b"original"
    assert os.listdir(tmp_path) == ["script.pdf"]


def test_export_buffer_lifecycle(tmp_path):
    buf = ExportBuffer(base_dir=str(tmp_path))
    path = buf.write_atomic("nested/a.txt", b"hello")
    assert os.path.dirname(path).startswith(buf.base_dir)
    with open(path, "rb") as f:
        assert f.read() == b"hello"
    buf.cleanup()
    assert not os.path.exists(buf.base_dir)


def test_export_buffer_debug_keeps_files(tmp_path):
    with ExportBuffer(base_dir=str(tmp_path), debug=True) as buf:
        path = buf.write_atomic("a.txt", b"x")
    assert os.path.exists(path)

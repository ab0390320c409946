"""Tests for the clean operation."""

import errno
import os
import shutil

import pytest

from buildtree.errors import CleanError, CleanIOError, InvalidPathError, PermissionDeniedError
from buildtree.layout.clean import clean


@pytest.fixture
def populated(tmp_path):
    root = tmp_path / "build"
    (root / "app" / "intermediates").mkdir(parents=True)
    (root / "app" / "intermediates" / "classes.dex").write_bytes(b"dex")
    (root / "app" / "output.apk").write_bytes(b"apk")
    (root / "stamp.txt").write_text("x", encoding="utf-8")
    return root


def test_clean_removes_tree(populated):
    result = clean(populated)
    assert result.removed is True
    assert result.path == populated
    assert not populated.exists()


def test_clean_missing_dir_is_noop(tmp_path):
    result = clean(tmp_path / "never_built")
    assert result.removed is False


def test_clean_is_idempotent(populated):
    clean(populated)
    second = clean(populated)
    assert second.removed is False
    assert not populated.exists()
    assert populated.parent.exists()


def test_clean_removes_plain_file(tmp_path):
    f = tmp_path / "build"
    f.write_text("not a dir", encoding="utf-8")
    assert clean(f).removed is True
    assert not f.exists()


@pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="needs POSIX symlinks")
def test_clean_does_not_follow_symlink(tmp_path):
    real = tmp_path / "real"
    real.mkdir()
    (real / "keep.txt").write_text("keep", encoding="utf-8")
    link = tmp_path / "build"
    link.symlink_to(real, target_is_directory=True)

    assert clean(link).removed is True
    assert not os.path.lexists(link)
    assert (real / "keep.txt").exists()


def test_clean_refuses_protected_ancestor(tmp_path):
    project = tmp_path / "ws" / "android"
    project.mkdir(parents=True)
    with pytest.raises(InvalidPathError):
        clean(tmp_path / "ws", protected=[project])
    with pytest.raises(InvalidPathError):
        clean(project, protected=[project])
    assert project.exists()


def test_clean_allows_sibling_of_protected(tmp_path, populated):
    project = tmp_path / "android"
    project.mkdir()
    assert clean(populated, protected=[project]).removed is True
    assert project.exists()


def test_clean_refuses_filesystem_root():
    with pytest.raises(InvalidPathError):
        clean(os.path.abspath(os.sep))


def test_permission_failure_is_wrapped(populated, monkeypatch):
    locked = populated / "app" / "output.apk"

    def fake_rmtree(path, *args, **kwargs):
        raise PermissionError(errno.EACCES, "Permission denied", str(locked))

    monkeypatch.setattr(shutil, "rmtree", fake_rmtree)
    with pytest.raises(PermissionDeniedError) as info:
        clean(populated)
    assert info.value.path == locked
    assert str(locked) in str(info.value)
    assert info.value.errno == errno.EACCES
    assert isinstance(info.value, CleanError)
    assert isinstance(info.value, OSError)


def test_io_failure_is_wrapped_and_not_retried(populated, monkeypatch):
    calls = []

    def fake_rmtree(path, *args, **kwargs):
        calls.append(path)
        raise OSError(errno.EBUSY, "Device or resource busy", str(path))

    monkeypatch.setattr(shutil, "rmtree", fake_rmtree)
    with pytest.raises(CleanIOError) as info:
        clean(populated)
    assert len(calls) == 1
    assert info.value.path == populated
    assert populated.exists()


def test_target_vanished_before_delete_is_noop(populated, monkeypatch):
    def fake_rmtree(path, *args, **kwargs):
        os.rename(path, str(path) + ".gone")
        raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(path))

    monkeypatch.setattr(shutil, "rmtree", fake_rmtree)
    assert clean(populated).removed is False


def test_entry_vanished_mid_delete_with_tree_gone(populated, monkeypatch):
    real_rmtree = shutil.rmtree

    def fake_rmtree(path, *args, **kwargs):
        real_rmtree(path)
        raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(populated / "app" / "output.apk"))

    monkeypatch.setattr(shutil, "rmtree", fake_rmtree)
    assert clean(populated).removed is True
    assert not populated.exists()


def test_entry_vanished_mid_delete_with_tree_left_is_error(populated, monkeypatch):
    missing = populated / "app" / "output.apk"

    def fake_rmtree(path, *args, **kwargs):
        raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(missing))

    monkeypatch.setattr(shutil, "rmtree", fake_rmtree)
    with pytest.raises(CleanIOError) as info:
        clean(populated)
    assert info.value.path == missing
    assert populated.exists()


@pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="needs POSIX symlinks")
def test_clean_refuses_protected_path_behind_symlinked_ancestor(tmp_path):
    ws = tmp_path / "ws"
    project = ws / "android"
    project.mkdir(parents=True)
    (project / "build.gradle.kts").write_text("// sources", encoding="utf-8")
    alias = tmp_path / "alias"
    alias.symlink_to(ws, target_is_directory=True)

    with pytest.raises(InvalidPathError):
        clean(alias / "android", protected=[project])
    with pytest.raises(InvalidPathError):
        clean(ws, protected=[alias / "android"])
    assert (project / "build.gradle.kts").exists()

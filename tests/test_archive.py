"""Tests for reading install hooks from package archives."""

import io
import tarfile

import pytest

from hookaudit.exceptions import ArchiveError
from hookaudit.integrations.archive import load_script, read_install_hook

HOOK = "post_install() {\n  echo installed\n}\n"


def make_package(path, members, mode="w:gz"):
    """Write a tar archive holding the given {name: bytes} members."""
    with tarfile.open(path, mode) as archive:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return path


class TestReadInstallHook:
    """Test suite for read_install_hook()."""

    @pytest.mark.parametrize("mode,suffix", [("w:gz", "tar.gz"), ("w:xz", "tar.xz"), ("w:bz2", "tar.bz2"), ("w", "tar")])
    def test_compressions(self, tmp_path, mode, suffix):
        """Every compression tarfile supports is readable."""
        path = make_package(tmp_path / f"foo-1.0.pkg.{suffix}", {".INSTALL": HOOK.encode()}, mode)
        assert read_install_hook(path) == HOOK

    def test_dot_slash_member(self, tmp_path):
        """Members stored as ./.INSTALL are found."""
        path = make_package(tmp_path / "foo.pkg.tar.gz", {"./.INSTALL": HOOK.encode(), "./usr/bin/foo": b"\x7fELF"})
        assert read_install_hook(path) == HOOK

    def test_invalid_utf8_replaced(self, tmp_path):
        """Undecodable bytes do not fail the read."""
        path = make_package(tmp_path / "foo.pkg.tar.gz", {".INSTALL": b"echo \xff\n"})
        assert read_install_hook(path) == "echo \ufffd\n"

    def test_missing_member(self, tmp_path):
        """Archives without an install hook raise ArchiveError."""
        path = make_package(tmp_path / "foo.pkg.tar.gz", {".PKGINFO": b"pkgname = foo\n"})
        with pytest.raises(ArchiveError) as exc:
            read_install_hook(path)
        assert ".INSTALL" in str(exc.value)
        assert str(path) in str(exc.value)

    def test_not_an_archive(self, tmp_path):
        """Plain files raise ArchiveError."""
        path = tmp_path / "foo.install"
        path.write_text(HOOK)
        with pytest.raises(ArchiveError):
            read_install_hook(path)

    def test_missing_file(self, tmp_path):
        """Missing files raise ArchiveError."""
        with pytest.raises(ArchiveError):
            read_install_hook(tmp_path / "nope.pkg.tar.gz")


class TestLoadScript:
    """Test suite for load_script()."""

    def test_plain_file(self, tmp_path):
        """Plain hook files are read as text."""
        path = tmp_path / "foo.install"
        path.write_text(HOOK)
        assert load_script(path) == HOOK

    def test_archive(self, tmp_path):
        """Archives go through the archive reader."""
        path = make_package(tmp_path / "foo.pkg.tar.gz", {".INSTALL": HOOK.encode()})
        assert load_script(str(path)) == HOOK

    def test_stdin(self, monkeypatch):
        """`-` reads standard input."""
        monkeypatch.setattr("sys.stdin", io.StringIO(HOOK))
        assert load_script("-") == HOOK

    def test_missing_plain_file(self, tmp_path):
        """Missing plain files raise OSError."""
        with pytest.raises(OSError):
            load_script(tmp_path / "nope.install")

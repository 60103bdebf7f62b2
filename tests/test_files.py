"""
Tests for pkgboot.io.files and pkgboot.io.archive modules.

Tests filesystem helpers including:
- Staging directory lifecycle (success and failure)
- Case-insensitive member lookup
- Atomic artifact placement
- Zip extraction and error mapping
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgboot.io.archive import ArchiveError, extract_archive, is_archive
from pkgboot.io.files import find_member, place_artifact, staging_directory


class TestStagingDirectory:
    """Tests for staging_directory."""

    def test_created_under_work_dir_and_removed(self, tmp_test_dir):
        """Test that the folder exists inside the block and is removed after."""
        work_dir = tmp_test_dir / "work"
        with staging_directory(work_dir) as staging:
            assert staging.is_dir()
            assert staging.parent == work_dir
            assert staging.name.startswith("pkgboot-")
            (staging / "file").write_text("x")

        assert not staging.exists()

    def test_removed_on_error(self, tmp_test_dir):
        """Test that the folder is removed when the block raises."""
        with pytest.raises(RuntimeError):
            with staging_directory(tmp_test_dir) as staging:
                (staging / "partial").write_text("x")
                raise RuntimeError("boom")

        assert not staging.exists()

    def test_unique_per_call(self, tmp_test_dir):
        """Test that nested stagings get distinct folders."""
        with staging_directory(tmp_test_dir) as a, staging_directory(tmp_test_dir) as b:
            assert a != b


class TestFindMember:
    """Tests for find_member."""

    def test_exact_match(self, tmp_test_dir):
        """Test an exact relative path."""
        (tmp_test_dir / "tools").mkdir()
        (tmp_test_dir / "tools" / "paket.exe").write_text("x")
        assert find_member(tmp_test_dir, "tools/paket.exe") == tmp_test_dir / "tools" / "paket.exe"

    def test_case_insensitive_match(self, tmp_test_dir):
        """Test that differently cased paths are found."""
        (tmp_test_dir / "Tools").mkdir()
        (tmp_test_dir / "Tools" / "Paket.EXE").write_text("x")
        found = find_member(tmp_test_dir, "tools/paket.exe")
        assert found == tmp_test_dir / "Tools" / "Paket.EXE"

    def test_backslash_path(self, tmp_test_dir):
        """Test that Windows-style separators are accepted."""
        (tmp_test_dir / "tools").mkdir()
        (tmp_test_dir / "tools" / "paket.exe").write_text("x")
        assert find_member(tmp_test_dir, "tools\\paket.exe") is not None

    def test_missing(self, tmp_test_dir):
        """Test that a missing member yields None."""
        assert find_member(tmp_test_dir, "tools/paket.exe") is None


class TestPlaceArtifact:
    """Tests for place_artifact."""

    def test_copies_and_creates_parent(self, tmp_test_dir):
        """Test that the target folder is created and content copied."""
        source = tmp_test_dir / "src.exe"
        source.write_bytes(b"EXE")
        target = tmp_test_dir / "a" / "b" / "paket.exe"

        assert place_artifact(source, target) == target
        assert target.read_bytes() == b"EXE"
        assert source.exists()

    def test_replaces_existing(self, tmp_test_dir):
        """Test that an existing file is replaced without leftovers."""
        source = tmp_test_dir / "src.exe"
        source.write_bytes(b"NEW")
        target = tmp_test_dir / "out" / "paket.exe"
        target.parent.mkdir()
        target.write_bytes(b"OLD")

        place_artifact(source, target)

        assert target.read_bytes() == b"NEW"
        assert [p.name for p in target.parent.iterdir()] == ["paket.exe"]

    def test_failure_cleans_temp_file(self, tmp_test_dir):
        """Test that a failed rename raises OSError and leaves no temp file."""
        source = tmp_test_dir / "src.exe"
        source.write_bytes(b"EXE")
        target = tmp_test_dir / "out" / "paket.exe"
        target.mkdir(parents=True)

        with pytest.raises(OSError):
            place_artifact(source, target)

        assert [p.name for p in target.parent.iterdir()] == ["paket.exe"]


class TestArchive:
    """Tests for archive extraction."""

    @pytest.mark.parametrize(
        "name,expected",
        [("paket.nupkg", True), ("x.ZIP", True), ("paket.exe", False), ("tar.gz", False)],
    )
    def test_is_archive(self, name, expected):
        """Test suffix detection."""
        assert is_archive(name) is expected

    def test_extract(self, tmp_test_dir, make_nupkg):
        """Test extracting a package."""
        archive = tmp_test_dir / "p.nupkg"
        make_nupkg({"tools/paket.exe": b"EXE", "Paket.nuspec": b"<xml/>"}, archive)

        out = extract_archive(archive, tmp_test_dir / "out")

        assert (out / "tools" / "paket.exe").read_bytes() == b"EXE"
        assert (out / "Paket.nuspec").exists()

    def test_bad_archive(self, tmp_test_dir):
        """Test that a non-zip file raises ArchiveError."""
        archive = tmp_test_dir / "p.nupkg"
        archive.write_bytes(b"not a zip")
        with pytest.raises(ArchiveError):
            extract_archive(archive, tmp_test_dir / "out")

    def test_missing_archive(self, tmp_test_dir):
        """Test that a missing file raises ArchiveError."""
        with pytest.raises(ArchiveError):
            extract_archive(Path(tmp_test_dir / "nope.zip"), tmp_test_dir / "out")

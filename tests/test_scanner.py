"""Tests for scanner.py — scan_directory and list_candidates."""
from filters import PatternSet
from scanner import list_candidates, scan_directory
from tests.conftest import make_file


class TestScanDirectory:
    def test_yields_relative_posix_paths(self, src):
        make_file(src / "icons" / "logo.png")
        assert list(scan_directory(src)) == ["icons/logo.png"]

    def test_yields_all_file_types(self, src):
        make_file(src / "logo.png")
        make_file(src / "photo.JPG")
        make_file(src / "notes.txt")
        assert len(list(scan_directory(src))) == 3

    def test_sorted_order(self, src):
        make_file(src / "b.png")
        make_file(src / "a.png")
        make_file(src / "c" / "d.png")
        assert list(scan_directory(src)) == ["a.png", "b.png", "c/d.png"]

    def test_directories_not_yielded(self, src):
        (src / "empty").mkdir()
        assert list(scan_directory(src)) == []

    def test_includes_zero_byte_files(self, src):
        # The batch decides what to do with empty files.
        make_file(src / "empty.png", b"")
        assert list(scan_directory(src)) == ["empty.png"]

    def test_skips_hidden(self, src):
        make_file(src / ".hidden.png")
        make_file(src / ".svn" / "logo.png")
        assert list(scan_directory(src)) == []

    def test_skips_symlinks(self, src, tmp_path):
        real = make_file(tmp_path / "real.png")
        (src / "link.png").symlink_to(real)
        assert list(scan_directory(src)) == []

    def test_respects_patterns(self, src):
        make_file(src / "logo.png")
        make_file(src / "originals" / "logo.png")
        ps = PatternSet(excludes=["originals/"])
        assert list(scan_directory(src, ps)) == ["logo.png"]


class TestListCandidates:
    def test_returns_list(self, src):
        make_file(src / "a.png")
        make_file(src / "b.png")
        assert list_candidates(src) == ["a.png", "b.png"]

    def test_empty_directory(self, src):
        assert list_candidates(src) == []

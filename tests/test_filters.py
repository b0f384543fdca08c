"""Tests for filters.py — include/exclude matching and pattern files."""
from pathlib import PurePath

from filters import PatternSet, load_pattern_file
from tests.conftest import make_file


def _p(s: str) -> PurePath:
    return PurePath(s)


class TestPatternSetEmpty:
    def test_no_patterns_is_empty(self):
        assert PatternSet().is_empty()

    def test_only_comments_and_blanks_is_empty(self):
        assert PatternSet(["# comment", "  "], ["", "\t"]).is_empty()

    def test_everything_selected_without_patterns(self):
        ps = PatternSet()
        assert ps.is_selected(_p("logo.png"))
        assert ps.is_selected(_p("notes.txt"))
        assert ps.is_selected(_p("a/b/c.png"))


class TestDefaultExcludes:
    def test_hidden_file_skipped(self):
        assert not PatternSet().is_selected(_p(".hidden.png"))

    def test_hidden_directory_skipped(self):
        assert not PatternSet().is_selected(_p(".svn/logo.png"))

    def test_can_be_disabled(self):
        assert PatternSet(default_excludes=False).is_selected(_p(".git/logo.png"))


class TestExcludes:
    def test_extension_shorthand(self):
        ps = PatternSet(excludes=[".bak"])
        assert not ps.is_selected(_p("logo.bak"))
        assert ps.is_selected(_p("logo.png"))

    def test_star_extension_case_insensitive(self):
        ps = PatternSet(excludes=["*.PSD"])
        assert not ps.is_selected(_p("layers.psd"))

    def test_name_matches_any_component(self):
        ps = PatternSet(excludes=["originals"])
        assert not ps.is_selected(_p("originals/logo.png"))
        assert not ps.is_selected(_p("icons/originals/logo.png"))
        assert ps.is_selected(_p("icons/logo.png"))

    def test_dir_only_pattern_ignores_files(self):
        ps = PatternSet(excludes=["build/"])
        assert not ps.is_selected(_p("build/logo.png"))
        assert ps.is_selected(_p("icons/build"))

    def test_slash_pattern_matches_relative_path(self):
        ps = PatternSet(excludes=["icons/*.png"])
        assert not ps.is_selected(_p("icons/logo.png"))
        assert ps.is_selected(_p("images/logo.png"))

    def test_slash_pattern_matches_subtree(self):
        ps = PatternSet(excludes=["images/raw"])
        assert not ps.is_selected(_p("images/raw/deep/logo.png"))
        assert ps.is_selected(_p("images/logo.png"))


class TestIncludes:
    def test_only_included_selected(self):
        ps = PatternSet(includes=["*.png"])
        assert ps.is_selected(_p("logo.png"))
        assert ps.is_selected(_p("logo.PNG"))
        assert not ps.is_selected(_p("notes.txt"))

    def test_exclude_wins_over_include(self):
        ps = PatternSet(includes=["*.png"], excludes=["originals/"])
        assert not ps.is_selected(_p("originals/logo.png"))

    def test_describe(self):
        ps = PatternSet(includes=["*.png"], excludes=["build/"])
        text = ps.describe()
        assert "includes: .png" in text
        assert "excludes: build/" in text

    def test_describe_none(self):
        assert PatternSet().describe() == "none"


class TestLoadPatternFile:
    def test_reads_patterns(self, tmp_path):
        f = make_file(tmp_path / "exclude", b"# comment\n\noriginals/\n*.bak\n")
        assert load_pattern_file(f) == ["originals/", "*.bak"]

    def test_missing_file_is_empty(self, tmp_path):
        assert load_pattern_file(tmp_path / "missing") == []

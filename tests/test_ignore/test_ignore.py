"""
Tests for IgnoreMatcher (gitignore semantics).
"""

import pytest

from localctx.indexer.ignore import IgnoreMatcher


class TestIgnoreMatcher:
    def test_no_patterns_ignores_nothing(self):
        matcher = IgnoreMatcher()
        assert matcher.ignores("src/app.py") is False
        assert matcher.ignores("node_modules", is_dir=True) is False

    def test_none_patterns(self):
        assert IgnoreMatcher(None).patterns == ()

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("app.log", True),
            ("logs/debug.log", True),
            ("app.py", False),
        ],
    )
    def test_wildcard_matches_at_any_depth(self, path, expected):
        assert IgnoreMatcher(["*.log"]).ignores(path) is expected

    def test_directory_only_pattern(self):
        matcher = IgnoreMatcher(["build/"])
        assert matcher.ignores("build", is_dir=True) is True
        assert matcher.ignores("pkg/build", is_dir=True) is True
        assert matcher.ignores("build/out.py") is True
        # A regular file named "build" is not a directory
        assert matcher.ignores("build") is False

    def test_anchored_pattern(self):
        matcher = IgnoreMatcher(["/dist"])
        assert matcher.ignores("dist", is_dir=True) is True
        assert matcher.ignores("pkg/dist", is_dir=True) is False

    def test_double_star(self):
        matcher = IgnoreMatcher(["**/generated/**"])
        assert matcher.ignores("a/b/generated/x.py") is True
        assert matcher.ignores("a/b/src/x.py") is False

    def test_negation_reincludes(self):
        matcher = IgnoreMatcher(["*.js", "!keep.js"])
        assert matcher.ignores("drop.js") is True
        assert matcher.ignores("src/keep.js") is False

    def test_root_is_never_ignored(self):
        matcher = IgnoreMatcher(["*"])
        assert matcher.ignores("", is_dir=True) is False
        assert matcher.ignores(".", is_dir=True) is False

    def test_windows_separators_normalized(self):
        matcher = IgnoreMatcher(["node_modules/"])
        assert matcher.ignores("web\\node_modules", is_dir=True) is True

    def test_patterns_kept_in_order(self):
        matcher = IgnoreMatcher(iter(["a", "b"]))
        assert matcher.patterns == ("a", "b")

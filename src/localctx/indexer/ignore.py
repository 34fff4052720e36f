"""
Gitignore-style exclusion rules for workspace discovery.

The pattern set is built once per discovery pass and shared read-only
across every workspace root.
"""

from collections.abc import Iterable

import pathspec


class IgnoreMatcher:
    """Answers whether a path relative to a workspace root is excluded.

    Patterns use gitignore syntax (negation, anchoring, directory-only
    rules with a trailing slash, ``**`` wildcards).
    """

    def __init__(self, patterns: Iterable[str] | None = None) -> None:
        self.patterns: tuple[str, ...] = tuple(patterns or ())
        self._spec = pathspec.GitIgnoreSpec.from_lines(self.patterns)

    def ignores(self, relative_path: str, is_dir: bool = False) -> bool:
        """Return True if ``relative_path`` is excluded by the rule set.

        Args:
            relative_path: Path relative to the workspace root
            is_dir: Whether the path names a directory; directory-only
                patterns only match when this is True

        Returns:
            True when the last matching rule excludes the path.
        """
        if not self.patterns:
            return False

        rel = relative_path.replace("\\", "/").strip("/")
        # The root itself is never excluded
        if not rel or rel == ".":
            return False
        if is_dir:
            rel += "/"
        return self._spec.match_file(rel)

    def __repr__(self) -> str:
        return f"IgnoreMatcher(patterns={list(self.patterns)!r})"

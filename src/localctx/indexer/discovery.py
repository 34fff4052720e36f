"""
Workspace file discovery for the local context index.

Walks every workspace folder and collects the absolute paths of the
source files the vector engine should index. The walk honours:

- Gitignore-style exclusion rules (checked when descending into a
  directory and again for every file)
- An extension whitelist, matched like the glob ``**/*<ext>``
- A per-file size cap and an aggregate size budget shared by all roots
- The symlink policy (resolved real paths or unresolved link paths)

Once the aggregate budget is used up the shared cancellation token is
set and every walker stops; the files collected so far are returned.
"""

import os
import threading
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import structlog

from .budget import FileStatError, SizeBudgetTracker
from .ignore import IgnoreMatcher
from .roots import WorkspaceFolder

logger = structlog.get_logger()

__all__ = [
    "CancellationToken",
    "DiscoveryReport",
    "FileDiscoveryEngine",
]

MAX_WORKERS = 32


class CancellationToken:
    """Shared stop flag for every walker of a discovery pass."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class DiscoveryReport:
    """Outcome of a discovery pass."""

    files: list[str] = field(default_factory=list)
    accepted_bytes: int = 0
    cancelled: bool = False
    failures: list[FileStatError] = field(default_factory=list)
    build_time_ms: float = 0.0


@dataclass
class _WalkContext:
    """Walk state of one root. matcher, tracker and token are shared by all roots."""

    root: str
    real_root: str
    matcher: IgnoreMatcher
    tracker: SizeBudgetTracker
    token: CancellationToken
    extensions: tuple[str, ...]
    include_symlinks: bool
    visited: set[str] = field(default_factory=set)
    visited_lock: threading.Lock = field(default_factory=threading.Lock)

    def mark_visited(self, real_dir: str) -> bool:
        """Record a real directory path; False if it was already walked."""
        with self.visited_lock:
            if real_dir in self.visited:
                return False
            self.visited.add(real_dir)
            return True


class FileDiscoveryEngine:
    """Builds the list of workspace files to feed the vector engine.

    Each workspace folder is walked independently and the results are
    concatenated in folder order. Inside a folder, directory entries are
    visited in sorted name order so the output is stable within a run.

    With ``workers > 1`` the top-level subdirectories of each folder are
    walked in a thread pool. Results are reassembled in submission order,
    so the output is the same as a sequential walk unless the budget runs
    out midway. Top-level links sharing a real directory are reduced to the
    first one before submission. Links nested in different subtrees that
    share a real directory are claimed by whichever walker reaches it first,
    so with ``include_symlinks=True`` the reported link path of such a
    directory may vary between parallel runs.
    """

    def __init__(self, workers: int = 1) -> None:
        """Initialize the engine.

        Args:
            workers: Threads used to walk subtrees of each folder (1 = sequential)
        """
        self.workers = max(1, min(workers, MAX_WORKERS))
        self.log = logger.bind(component="file_discovery")

    def discover(
        self,
        workspace_folders: list[WorkspaceFolder] | None,
        ignore_rules: Iterable[str] | None = None,
        include_symlinks: bool = False,
        file_extensions: Iterable[str] | None = None,
        max_file_size_mb: float | None = None,
        max_index_size_mb: float | None = None,
    ) -> list[str]:
        """Return the absolute paths of the eligible files of the workspace.

        See ``run`` for the arguments.
        """
        return self.run(
            workspace_folders,
            ignore_rules=ignore_rules,
            include_symlinks=include_symlinks,
            file_extensions=file_extensions,
            max_file_size_mb=max_file_size_mb,
            max_index_size_mb=max_index_size_mb,
        ).files

    def run(
        self,
        workspace_folders: list[WorkspaceFolder] | None,
        ignore_rules: Iterable[str] | None = None,
        include_symlinks: bool = False,
        file_extensions: Iterable[str] | None = None,
        max_file_size_mb: float | None = None,
        max_index_size_mb: float | None = None,
    ) -> DiscoveryReport:
        """Walk every workspace folder and report the eligible files.

        Args:
            workspace_folders: Folders to walk; None or empty yields no files
            ignore_rules: Gitignore-style patterns, relative to each folder
            include_symlinks: If True, symlinked paths are reported unresolved;
                otherwise they are resolved to real paths
            file_extensions: Extensions to keep (e.g. ``".py"``); None or
                empty keeps every extension
            max_file_size_mb: Per-file cap in MB, None for unbounded
            max_index_size_mb: Aggregate cap in MB, None for unbounded

        Returns:
            DiscoveryReport with the files and the budget outcome.
        """
        if not workspace_folders:
            return DiscoveryReport()

        start_ms = time.monotonic() * 1000

        matcher = IgnoreMatcher(ignore_rules)
        tracker = SizeBudgetTracker(max_file_size_mb, max_index_size_mb)
        token = CancellationToken()
        extensions = tuple(file_extensions or ())

        self.log.info(
            "discovery.start",
            roots=len(workspace_folders),
            ignore_rules=len(matcher.patterns),
            extensions=len(extensions),
            max_file_size_mb=max_file_size_mb,
            max_index_size_mb=max_index_size_mb,
        )

        files: list[str] = []
        for folder in workspace_folders:
            ctx = _WalkContext(
                root=os.path.abspath(folder.path),
                real_root=os.path.realpath(folder.path),
                matcher=matcher,
                tracker=tracker,
                token=token,
                extensions=extensions,
                include_symlinks=include_symlinks,
            )
            root_files = self._walk_root(ctx)
            self.log.debug("discovery.root_done", root=ctx.root, files=len(root_files))
            files.extend(root_files)

        if token.cancelled:
            self.log.warning(
                "discovery.budget_exhausted",
                files=len(files),
                accepted_bytes=tracker.accepted_bytes,
            )

        report = DiscoveryReport(
            files=files,
            accepted_bytes=tracker.accepted_bytes,
            cancelled=token.cancelled,
            failures=list(tracker.failures),
            build_time_ms=round(time.monotonic() * 1000 - start_ms, 1),
        )
        self.log.info(
            "discovery.done",
            files=len(report.files),
            accepted_bytes=report.accepted_bytes,
            stat_failures=len(report.failures),
            cancelled=report.cancelled,
            build_time_ms=report.build_time_ms,
        )
        return report

    # -- Walk --------------------------------------------------------------

    def _walk_root(self, ctx: _WalkContext) -> list[str]:
        if ctx.token.cancelled:
            return []
        if not os.path.isdir(ctx.root):
            self.log.warning("discovery.root_missing", root=ctx.root)
            return []

        if self.workers == 1:
            return self._walk_tree(ctx, ctx.root)

        # Top level by hand, then one task per surviving subdirectory
        files: list[str] = []
        top = next(os.walk(ctx.root, followlinks=True), None)
        if top is None:
            return files
        dirpath, dirnames, filenames = top
        self._visit(ctx, dirpath, dirnames, filenames, files)
        # Several top-level links to one directory: the first in sorted order
        # owns it, as in the sequential walk
        subdirs: list[str] = []
        claimed: set[str] = set()
        for name in dirnames:
            subdir = os.path.join(dirpath, name)
            real_subdir = os.path.realpath(subdir)
            if real_subdir in claimed:
                continue
            claimed.add(real_subdir)
            subdirs.append(subdir)

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures = [pool.submit(self._walk_tree, ctx, subdir) for subdir in subdirs]
            for future in futures:
                files.extend(future.result())
        return files

    def _walk_tree(self, ctx: _WalkContext, top: str) -> list[str]:
        files: list[str] = []
        if ctx.token.cancelled:
            return files

        def on_error(error: OSError) -> None:
            self.log.warning("discovery.walk_error", path=error.filename, error=str(error))

        for dirpath, dirnames, filenames in os.walk(top, onerror=on_error, followlinks=True):
            if not self._visit(ctx, dirpath, dirnames, filenames, files):
                break
        return files

    def _visit(
        self,
        ctx: _WalkContext,
        dirpath: str,
        dirnames: list[str],
        filenames: list[str],
        files: list[str],
    ) -> bool:
        """Process one directory of an ``os.walk``.

        Prunes ``dirnames`` in place and appends accepted files.

        Returns:
            False when the walk must stop (cancellation).
        """
        if ctx.tracker.exhausted:
            ctx.token.cancel()
        if ctx.token.cancelled:
            dirnames[:] = []
            return False

        real_dir = os.path.realpath(dirpath)
        if not ctx.mark_visited(real_dir):
            # Symlink cycle or directory already reached through another link
            dirnames[:] = []
            return True

        dirnames[:] = sorted(
            d for d in dirnames
            if not self._is_excluded_dir(ctx, os.path.join(dirpath, d))
        )

        # Reached through a symlinked directory somewhere above
        via_link = real_dir != os.path.normpath(
            os.path.join(ctx.real_root, os.path.relpath(dirpath, ctx.root))
        )

        for filename in sorted(filenames):
            if ctx.token.cancelled:
                dirnames[:] = []
                return False
            if ctx.tracker.exhausted:
                ctx.token.cancel()
                dirnames[:] = []
                return False

            accepted = self._accept_file(ctx, os.path.join(dirpath, filename), via_link)
            if accepted is not None:
                files.append(accepted)

        # The last file of the directory may have used up the budget
        if ctx.token.cancelled:
            dirnames[:] = []
            return False
        return True

    # -- Filters -----------------------------------------------------------

    def _is_excluded_dir(self, ctx: _WalkContext, path: str) -> bool:
        rel = os.path.relpath(path, ctx.root)
        return ctx.matcher.ignores(rel, is_dir=True)

    def _accept_file(self, ctx: _WalkContext, path: str, via_link: bool = False) -> str | None:
        """Apply the leaf filters to a file; returns the path to report or None."""
        rel = os.path.relpath(path, ctx.root)

        if ctx.extensions and not _matches_extensions(rel, ctx.extensions):
            return None
        if ctx.matcher.ignores(rel):
            return None

        is_link = os.path.islink(path)
        if is_link and not os.path.exists(path):
            self.log.debug("discovery.broken_symlink", path=path)
            return None
        if (is_link or via_link) and not ctx.include_symlinks:
            path = os.path.realpath(path)

        if ctx.tracker.bounded:
            if not ctx.tracker.accepts(path):
                return None
            if ctx.tracker.exhausted:
                ctx.token.cancel()
        return path


def _matches_extensions(relative_path: str, extensions: tuple[str, ...]) -> bool:
    """Match a relative path against the globs ``**/*<ext>``.

    Like a default glob matcher, wildcards never match a dot-prefixed
    segment, so hidden files and files under hidden directories are skipped.
    """
    parts = relative_path.replace("\\", "/").split("/")
    if any(part.startswith(".") for part in parts):
        return False
    name = parts[-1]
    return any(name.endswith(ext) for ext in extensions)

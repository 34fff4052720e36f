"""
Indexer module: workspace file discovery.

Selects the workspace files handed to the vector engine: common-root
resolution, ignore rules, extension whitelist and size budget.
"""

from .budget import FileStatError, SizeBudgetTracker, SizeConstraints
from .discovery import CancellationToken, DiscoveryReport, FileDiscoveryEngine
from .ignore import IgnoreMatcher
from .languages import DEFAULT_FILE_EXTENSIONS, EXT_MAP, RECOGNIZED_LANGUAGES
from .roots import NoWorkspaceError, WorkspaceFolder, find_common_root, uri_to_path

__all__ = [
    "CancellationToken",
    "DEFAULT_FILE_EXTENSIONS",
    "DiscoveryReport",
    "EXT_MAP",
    "FileDiscoveryEngine",
    "FileStatError",
    "IgnoreMatcher",
    "NoWorkspaceError",
    "RECOGNIZED_LANGUAGES",
    "SizeBudgetTracker",
    "SizeConstraints",
    "WorkspaceFolder",
    "find_common_root",
    "uri_to_path",
]

"""
Workspace folders and common-root resolution.

A multi-root workspace is a list of folders, each identified by a
``file://`` URI. The vector engine is started against a single root
directory: the deepest directory shared by every folder.
"""

import os
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

__all__ = [
    "NoWorkspaceError",
    "WorkspaceFolder",
    "find_common_root",
    "uri_to_path",
]


class NoWorkspaceError(ValueError):
    """Root resolution was requested without any workspace folder."""

    def __init__(self) -> None:
        super().__init__("No workspace folders provided")


def uri_to_path(uri: str) -> str:
    """Decode a ``file://`` URI to a filesystem path.

    Values without a scheme are taken as plain paths.
    """
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return uri
    return unquote(parsed.path)


@dataclass(frozen=True)
class WorkspaceFolder:
    """A root directory opened by the client."""

    uri: str
    name: str = ""

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> "WorkspaceFolder":
        absolute = os.path.abspath(os.fspath(path))
        return cls(uri="file://" + absolute, name=os.path.basename(absolute))

    @property
    def path(self) -> str:
        return uri_to_path(self.uri)


def find_common_root(workspace_folders: list[WorkspaceFolder]) -> str:
    """Return the deepest directory that contains every workspace folder.

    Paths are compared segment by segment up to the length of the
    shortest one. When not even the first segment is shared, the first
    folder's own path is returned.

    Args:
        workspace_folders: Folders of the workspace, in client order

    Returns:
        Path of the common root

    Raises:
        NoWorkspaceError: If ``workspace_folders`` is empty.
    """
    if not workspace_folders:
        raise NoWorkspaceError()
    if len(workspace_folders) == 1:
        return workspace_folders[0].path

    paths = [folder.path for folder in workspace_folders]
    split_paths = [[segment for segment in p.split(os.sep) if segment] for p in paths]
    min_length = min(len(segments) for segments in split_paths)

    last_matching_index = -1
    for i in range(min_length):
        segment = split_paths[0][i]
        if all(segments[i] == segment for segments in split_paths):
            last_matching_index = i
        else:
            break

    if last_matching_index == -1:
        return paths[0]
    return os.sep + os.sep.join(split_paths[0][: last_matching_index + 1])

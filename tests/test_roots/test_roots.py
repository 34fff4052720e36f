"""
Tests for workspace folders and common-root resolution.

Covers:
- uri_to_path (file URIs, percent-decoding, plain paths)
- WorkspaceFolder (path, from_path)
- find_common_root (single, shared prefix, no shared prefix, empty)
"""

import os

import pytest

from localctx.indexer.roots import (
    NoWorkspaceError,
    WorkspaceFolder,
    find_common_root,
    uri_to_path,
)

pytestmark = pytest.mark.skipif(os.sep != "/", reason="POSIX paths")


def _folders(*uris: str) -> list[WorkspaceFolder]:
    return [WorkspaceFolder(uri=u) for u in uris]


class TestUriToPath:
    def test_file_uri(self):
        assert uri_to_path("file:///home/dev/project") == "/home/dev/project"

    def test_percent_decoding(self):
        assert uri_to_path("file:///home/dev/my%20project") == "/home/dev/my project"

    def test_plain_path_passthrough(self):
        assert uri_to_path("/home/dev/project") == "/home/dev/project"


class TestWorkspaceFolder:
    def test_path_from_uri(self):
        assert WorkspaceFolder(uri="file:///a/b").path == "/a/b"

    def test_from_path_is_absolute(self, tmp_path):
        folder = WorkspaceFolder.from_path(tmp_path)
        assert folder.uri == f"file://{tmp_path}"
        assert folder.path == str(tmp_path)
        assert folder.name == tmp_path.name

    def test_frozen(self):
        folder = WorkspaceFolder(uri="file:///a")
        with pytest.raises(AttributeError):
            folder.uri = "file:///b"  # type: ignore[misc]


class TestFindCommonRoot:
    def test_empty_raises(self):
        with pytest.raises(NoWorkspaceError):
            find_common_root([])

    def test_single_folder_returned_as_is(self):
        assert find_common_root(_folders("file:///a/b")) == "/a/b"

    def test_single_folder_not_normalized(self):
        assert find_common_root(_folders("file:///a/b/")) == "/a/b/"

    def test_siblings(self):
        assert find_common_root(_folders("file:///a/b/x", "file:///a/b/y")) == "/a/b"

    def test_nested_folder(self):
        assert find_common_root(_folders("file:///a/b", "file:///a/b/c/d")) == "/a/b"

    def test_three_folders(self):
        folders = _folders("file:///src/app/web", "file:///src/app/api", "file:///src/lib")
        assert find_common_root(folders) == "/src"

    def test_identical_folders(self):
        assert find_common_root(_folders("file:///a/b", "file:///a/b")) == "/a/b"

    def test_no_shared_prefix_falls_back_to_first(self):
        assert find_common_root(_folders("file:///a/b", "file:///c/d")) == "/a/b"

    def test_segment_match_is_not_string_prefix(self):
        # "/a/bc" and "/a/bd" share "/a", not "/a/b"
        assert find_common_root(_folders("file:///a/bc", "file:///a/bd")) == "/a"

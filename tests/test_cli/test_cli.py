"""
Tests for the localctx CLI (click CliRunner).
"""

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from localctx.cli import EXIT_CONFIG_ERROR, EXIT_FAILED, main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    ws = tmp_path / "ws"
    (ws / "src").mkdir(parents=True)
    (ws / "dist").mkdir()
    (ws / "src" / "a.py").write_bytes(b"x" * 100)
    (ws / "src" / "b.py").write_bytes(b"x" * 100)
    (ws / "dist" / "bundle.js").write_bytes(b"x" * 10)
    return ws


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["LOCALCTX_LOG_LEVEL", "LOCALCTX_MAX_FILE_SIZE_MB",
                 "LOCALCTX_MAX_INDEX_SIZE_MB", "LOCALCTX_WORKSPACE"]:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.skipif(os.sep != "/", reason="POSIX paths")
class TestRoot:
    def test_common_root(self, runner):
        result = runner.invoke(main, ["root", "file:///a/b/x", "file:///a/b/y"])
        assert result.exit_code == 0
        assert result.output.strip() == "/a/b"

    def test_plain_paths(self, runner, tmp_path):
        result = runner.invoke(main, ["root", str(tmp_path / "one"), str(tmp_path / "two")])
        assert result.output.strip() == str(tmp_path)

    def test_requires_folders(self, runner):
        result = runner.invoke(main, ["root"])
        assert result.exit_code != 0


class TestDiscover:
    def test_lists_paths(self, runner, workspace):
        result = runner.invoke(main, ["discover", str(workspace), "--quiet"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines == [
            str(workspace / "dist" / "bundle.js"),
            str(workspace / "src" / "a.py"),
            str(workspace / "src" / "b.py"),
        ]

    def test_ignore_and_ext(self, runner, workspace):
        result = runner.invoke(
            main, ["discover", str(workspace), "--ignore", "dist/", "--ext", ".py", "--quiet"]
        )
        assert result.exit_code == 0
        assert len(result.output.splitlines()) == 2

    def test_json_report_with_budget(self, runner, workspace):
        budget_mb = str(150 / (1024 * 1024))
        result = runner.invoke(
            main, ["discover", str(workspace), "--ext", ".py", "--max-index-size-mb", budget_mb, "--json"]
        )
        assert result.exit_code == 0
        report = json.loads(result.output)
        assert report["files"] == [str(workspace / "src" / "a.py")]
        assert report["accepted_bytes"] == 100
        assert report["budget_exhausted"] is False
        assert report["stat_failures"] == []

    def test_without_folders(self, runner):
        result = runner.invoke(main, ["discover", "--quiet"])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_folders_from_config(self, runner, workspace, tmp_path):
        config = tmp_path / "cfg.yaml"
        config.write_text(f"workspace:\n  folders: ['{workspace}']\ncontext:\n  fileExtensions: ['.js']\n")
        result = runner.invoke(main, ["discover", "-c", str(config), "--quiet"])
        assert result.exit_code == 0
        assert result.output.splitlines() == [str(workspace / "dist" / "bundle.js")]

    def test_invalid_size(self, runner, workspace):
        result = runner.invoke(main, ["discover", str(workspace), "--max-file-size-mb=-3", "--quiet"])
        assert result.exit_code == EXIT_CONFIG_ERROR


class TestAggregate:
    def test_from_stdin(self, runner):
        chunks = [
            {"filePath": "t.js", "relativePath": "src/t.js", "content": "const a = 1;",
             "programmingLanguage": "javascript", "startLine": 2},
            {"filePath": "t.js", "relativePath": "src/t.js", "content": "console.log(a);",
             "programmingLanguage": "javascript", "startLine": 1},
        ]
        result = runner.invoke(main, ["aggregate"], input=json.dumps(chunks))
        assert result.exit_code == 0
        assert json.loads(result.output) == [{
            "relativeFilePath": "src/t.js",
            "programmingLanguage": {"languageName": "javascript"},
            "text": "console.log(a);\nconst a = 1;",
        }]

    def test_from_file_with_language_whitelist(self, runner, tmp_path):
        source = tmp_path / "chunks.json"
        source.write_text(json.dumps([
            {"filePath": "x.py", "content": "pass", "programmingLanguage": "python"},
        ]))
        result = runner.invoke(main, ["aggregate", str(source), "--language", "rust"])
        assert result.exit_code == 0
        assert json.loads(result.output) == [{"text": "pass"}]

    def test_invalid_json(self, runner):
        result = runner.invoke(main, ["aggregate"], input="{not json")
        assert result.exit_code == EXIT_FAILED

    def test_not_a_list(self, runner):
        result = runner.invoke(main, ["aggregate"], input='{"filePath": "x"}')
        assert result.exit_code == EXIT_FAILED


class TestValidateConfig:
    def test_valid(self, runner, tmp_path):
        config = tmp_path / "cfg.yaml"
        config.write_text("context:\n  maxIndexSizeMb: null\n")
        result = runner.invoke(main, ["validate-config", "-c", str(config)])
        assert result.exit_code == 0
        assert "Valid configuration" in result.output
        assert "Max index size (MB): unbounded" in result.output

    def test_invalid(self, runner, tmp_path):
        config = tmp_path / "cfg.yaml"
        config.write_text("context:\n  bogus: 1\n")
        result = runner.invoke(main, ["validate-config", "-c", str(config)])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_top_level_list(self, runner, tmp_path):
        config = tmp_path / "cfg.yaml"
        config.write_text("- a\n- b\n")
        result = runner.invoke(main, ["validate-config", "-c", str(config)])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Invalid configuration" in result.output
        assert isinstance(result.exception, SystemExit)

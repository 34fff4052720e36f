"""
Main CLI for localctx using Click.

Commands:
    root             Print the common root of a set of workspace folders
    discover         List the files the context index would ingest
    aggregate        Merge retrieved chunks (JSON) into per-file documents
    validate-config  Validate a YAML configuration file
"""

import json
import sys
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from . import __version__
from .config.loader import load_config
from .config.schema import AppConfig
from .indexer import FileDiscoveryEngine, NoWorkspaceError, WorkspaceFolder, find_common_root
from .logging import configure_logging
from .retrieval import ChunkAggregator

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 3

# Current version
_VERSION = __version__


def _folders_from(values: list[str]) -> list[WorkspaceFolder]:
    """Accept both file:// URIs and plain paths."""
    folders = []
    for value in values:
        if value.startswith("file://"):
            folders.append(WorkspaceFolder(uri=value))
        else:
            folders.append(WorkspaceFolder.from_path(value))
    return folders


def _load_or_exit(config_path: Path | None, cli_args: dict[str, Any]) -> AppConfig:
    try:
        return load_config(config_path=config_path, cli_args=cli_args)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except (ValidationError, yaml.YAMLError, ValueError) as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


@click.group()
@click.version_option(version=_VERSION, prog_name="localctx")
def main() -> None:
    """localctx - File selection and result shaping for a local code-context index.

    Discovers the workspace files a local vector engine should index and
    merges the engine's retrieved chunks into per-file documents.
    """
    pass


@main.command()
@click.argument("folders", nargs=-1, required=True)
def root(folders: tuple[str, ...]) -> None:
    """Print the deepest directory shared by FOLDERS (paths or file:// URIs)."""
    try:
        click.echo(find_common_root(_folders_from(list(folders))))
    except NoWorkspaceError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)


@main.command()
@click.argument("folders", nargs=-1)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to the YAML configuration file",
)
@click.option(
    "--ignore",
    multiple=True,
    help="Gitignore-style pattern to exclude (repeatable)",
)
@click.option(
    "--ext",
    multiple=True,
    help="File extension to include, e.g. .py (repeatable)",
)
@click.option(
    "--max-file-size-mb",
    help="Per-file size cap in MB (0 or 'unbounded' for no cap)",
)
@click.option(
    "--max-index-size-mb",
    help="Total size cap in MB (0 or 'unbounded' for no cap)",
)
@click.option(
    "--symlinks/--no-symlinks",
    default=None,
    help="Report symlinked files by link path instead of real path",
)
@click.option(
    "--workers",
    type=int,
    help="Threads used to walk subtrees of each folder",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Print a JSON report instead of one path per line",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Verbose logging (-v info, -vv debug)",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Write JSON logs to this file",
)
@click.option(
    "--quiet",
    is_flag=True,
    help="Silence console logging",
)
def discover(folders: tuple[str, ...], **kwargs: Any) -> None:
    """List the files the context index would ingest from FOLDERS."""
    cli_args = {
        "folders": list(folders),
        "ignore": kwargs["ignore"],
        "ext": kwargs["ext"],
        "max_file_size_mb": kwargs["max_file_size_mb"],
        "max_index_size_mb": kwargs["max_index_size_mb"],
        "symlinks": kwargs["symlinks"],
        "workers": kwargs["workers"],
        "verbose": kwargs["verbose"] or None,
        "log_file": kwargs["log_file"],
    }
    config = _load_or_exit(kwargs["config"], cli_args)
    configure_logging(config.logging, json_output=kwargs["json_output"], quiet=kwargs["quiet"])

    if not config.workspace.folders:
        click.echo("Error: no workspace folders given", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    ctx = config.context
    engine = FileDiscoveryEngine(workers=config.discovery.workers)
    report = engine.run(
        _folders_from(config.workspace.folders),
        ignore_rules=ctx.ignore_file_patterns,
        include_symlinks=ctx.include_symlinks,
        file_extensions=ctx.file_extensions,
        max_file_size_mb=ctx.max_file_size_mb,
        max_index_size_mb=ctx.max_index_size_mb,
    )

    if kwargs["json_output"]:
        click.echo(json.dumps({
            "files": report.files,
            "accepted_bytes": report.accepted_bytes,
            "budget_exhausted": report.cancelled,
            "stat_failures": [f.path for f in report.failures],
            "build_time_ms": report.build_time_ms,
        }, indent=2))
        return

    for path in report.files:
        click.echo(path)


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--language",
    "languages",
    multiple=True,
    help="Recognized language (repeatable); defaults to the built-in table",
)
def aggregate(source, languages: tuple[str, ...]) -> None:
    """Merge a JSON array of chunks from SOURCE (file or '-') into documents."""
    try:
        payload = json.load(source)
    except json.JSONDecodeError as e:
        click.echo(f"Error: invalid JSON input: {e}", err=True)
        sys.exit(EXIT_FAILED)

    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        click.echo("Error: expected a JSON array of chunk objects", err=True)
        sys.exit(EXIT_FAILED)

    aggregator = ChunkAggregator(languages) if languages else ChunkAggregator()
    documents = aggregator.aggregate(payload)
    click.echo(json.dumps([doc.to_dict() for doc in documents], indent=2))


@main.command()
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to the configuration file to validate",
)
def validate_config(config: Path) -> None:
    """Validate a YAML configuration file."""
    app_config = _load_or_exit(config, {})
    ctx = app_config.context
    click.echo("Valid configuration")
    click.echo(f"  Workspace folders: {len(app_config.workspace.folders)}")
    click.echo(f"  Ignore patterns: {len(ctx.ignore_file_patterns)}")
    click.echo(f"  Extensions: {len(ctx.file_extensions)}")
    click.echo(f"  Max file size (MB): {ctx.max_file_size_mb or 'unbounded'}")
    click.echo(f"  Max index size (MB): {ctx.max_index_size_mb or 'unbounded'}")


if __name__ == "__main__":
    main()

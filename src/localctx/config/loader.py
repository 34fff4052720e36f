"""
Configuration loader with deep merge.

Precedence order (lowest to highest):
1. Defaults (defined in the Pydantic schemas)
2. YAML file
3. Environment variables
4. CLI arguments

The merge is recursive so every key is preserved at every level.
"""

import os
from pathlib import Path
from typing import Any

import yaml

from .schema import AppConfig, ContextConfig

# Values that clear a size cap when given through env vars or the CLI
UNBOUNDED_VALUES = frozenset({"0", "none", "null", "unbounded"})


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary whose values win on leaf conflicts

    Returns:
        New merged dictionary.

    Example:
        >>> deep_merge({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"b": 99}, "e": 4})
        {'a': {'b': 99, 'c': 2}, 'd': 3, 'e': 4}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def parse_size_mb(value: Any) -> Any:
    """Parse a size cap given as text; ``0``/``unbounded`` mean no cap.

    Non-numeric values are returned unchanged so Pydantic reports them.
    """
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in UNBOUNDED_VALUES:
        return None
    try:
        return float(text)
    except ValueError:
        return value


def _normalize_context_keys(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Rewrite camelCase keys of the ``context`` section to field names.

    Lets YAML files use the client's camelCase names and still merge with
    snake_case overrides from env vars and the CLI.
    """
    context = config_dict.get("context")
    if not isinstance(context, dict):
        return config_dict

    alias_to_name = {
        field.alias: name
        for name, field in ContextConfig.model_fields.items()
        if field.alias
    }
    normalized = {alias_to_name.get(key, key): value for key, value in context.items()}
    return {**config_dict, "context": normalized}


def load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None to skip

    Returns:
        Dictionary with the configuration, or an empty dict if there is no file

    Raises:
        FileNotFoundError: If config_path does not exist
        ValueError: If the top level of the file is not a mapping
    """
    if not config_path:
        return {}

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Configuration file must contain a mapping, got {type(data).__name__}: {config_path}"
        )
    return _normalize_context_keys(data)


def load_env_overrides() -> dict[str, Any]:
    """Load overrides from environment variables.

    Supported variables:
        LOCALCTX_LOG_LEVEL: overrides logging.level
        LOCALCTX_MAX_FILE_SIZE_MB: overrides context.max_file_size_mb
        LOCALCTX_MAX_INDEX_SIZE_MB: overrides context.max_index_size_mb
        LOCALCTX_WORKSPACE: overrides workspace.folders (os.pathsep-separated)

    Returns:
        Dictionary with the env var overrides
    """
    overrides: dict[str, Any] = {}

    if log_level := os.environ.get("LOCALCTX_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level.lower()

    if (max_file := os.environ.get("LOCALCTX_MAX_FILE_SIZE_MB")) is not None:
        overrides.setdefault("context", {})["max_file_size_mb"] = parse_size_mb(max_file)

    if (max_index := os.environ.get("LOCALCTX_MAX_INDEX_SIZE_MB")) is not None:
        overrides.setdefault("context", {})["max_index_size_mb"] = parse_size_mb(max_index)

    if workspace := os.environ.get("LOCALCTX_WORKSPACE"):
        folders = [f for f in workspace.split(os.pathsep) if f]
        overrides.setdefault("workspace", {})["folders"] = folders

    return overrides


def apply_cli_overrides(config_dict: dict[str, Any], cli_args: dict[str, Any]) -> dict[str, Any]:
    """Apply overrides from CLI arguments.

    Args:
        config_dict: Base configuration (already merged with YAML and env)
        cli_args: Dictionary with the CLI arguments

    Returns:
        Configuration with the CLI overrides applied
    """
    overrides: dict[str, Any] = {}

    # Context overrides
    if cli_args.get("ignore"):
        overrides.setdefault("context", {})["ignore_file_patterns"] = list(cli_args["ignore"])

    if cli_args.get("ext"):
        overrides.setdefault("context", {})["file_extensions"] = list(cli_args["ext"])

    if cli_args.get("symlinks") is not None:
        overrides.setdefault("context", {})["include_symlinks"] = cli_args["symlinks"]

    if cli_args.get("max_file_size_mb") is not None:
        overrides.setdefault("context", {})["max_file_size_mb"] = parse_size_mb(
            cli_args["max_file_size_mb"]
        )

    if cli_args.get("max_index_size_mb") is not None:
        overrides.setdefault("context", {})["max_index_size_mb"] = parse_size_mb(
            cli_args["max_index_size_mb"]
        )

    # Workspace overrides
    if cli_args.get("folders"):
        overrides.setdefault("workspace", {})["folders"] = list(cli_args["folders"])

    # Discovery overrides
    if cli_args.get("workers") is not None:
        overrides.setdefault("discovery", {})["workers"] = cli_args["workers"]

    # Logging overrides
    if cli_args.get("log_level"):
        overrides.setdefault("logging", {})["level"] = cli_args["log_level"]

    if cli_args.get("log_file"):
        overrides.setdefault("logging", {})["file"] = cli_args["log_file"]

    if cli_args.get("verbose") is not None:
        overrides.setdefault("logging", {})["verbose"] = cli_args["verbose"]

    return deep_merge(config_dict, overrides)


def load_config(
    config_path: Path | None = None,
    cli_args: dict[str, Any] | None = None,
) -> AppConfig:
    """Load and validate the complete application configuration.

    Loading process:
    1. Pydantic defaults
    2. Merge with YAML (if any)
    3. Merge with env vars
    4. Merge with CLI args
    5. Validate with Pydantic

    Args:
        config_path: Path to the YAML configuration file
        cli_args: Dictionary with the CLI arguments

    Returns:
        Validated, complete AppConfig

    Raises:
        FileNotFoundError: If config_path does not exist
        ValueError: If the YAML file is not a mapping
        ValidationError: If the final configuration is not valid
    """
    cli_args = cli_args or {}

    yaml_config = load_yaml_config(config_path)

    env_overrides = load_env_overrides()
    merged = deep_merge(yaml_config, env_overrides)

    merged = apply_cli_overrides(merged, cli_args)

    return AppConfig(**merged)
